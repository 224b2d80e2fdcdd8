"""
Absolute-difference autocorrelation over a window of samples.

For a candidate period ``p`` the score is::

    correlation(p) = 1 - sum(|x[j] - x[j + p]| / N for j < M) / M

with ``M = length // 2`` and ``N`` the normalization factor (1, 2*rms or
peak). A waveform shifted by its own period scores close to 1.

Periods are scanned in ascending order while following the shape of the
curve: an ascending (or flat) step is a candidate peak, a descending step
closes the current peak and records the trough. Two policies pick the best
peak:

- global maximum (default, or ``min_correlation`` only): a peak replaces the
  best one only if it scores higher.
- local maximum (``min_correlation_increase`` set): every ascending step
  becomes the new best, so the most recent peak wins.

Early stop happens on a descending step once the best correlation exceeds
``min_correlation`` or rises above the last trough by more than
``min_correlation_increase``. Without either threshold the whole period set
is scanned and the window counts as found.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .config import DetectorConfig
from .dsp import peak, rms
from .periods import PeriodSet

MIN_ACCEPTED_CORRELATION = 0.01


@dataclass
class CorrelationScan:
    found: bool
    rms: float
    best_period: int = 0
    best_correlation: float = 0.0
    worst_period: int = 0
    worst_correlation: float = 1.0
    gated: bool = False

    @property
    def accepted(self) -> bool:
        return self.found and self.best_correlation > MIN_ACCEPTED_CORRELATION


class CorrelationEngine:
    """Scores candidate periods for one configuration.

    The correlation curve is pre-allocated for ``length // 2 + 1`` periods
    and cleared at the start of every scan, so nothing from a previous
    window survives into the next one.
    """

    def __init__(self, config: DetectorConfig, periods: PeriodSet):
        self.config = config
        self.periods = periods
        self.max_lag = config.max_lag
        self.correlations = np.full(self.max_lag + 1, np.nan, dtype=np.float64)
        self.find_local_maximum = config.min_correlation_increase is not None

    def normalization(self, window: np.ndarray, window_rms: float) -> float:
        if self.config.normalize == "rms":
            factor = 2.0 * window_rms
        elif self.config.normalize == "peak":
            factor = peak(window)
        else:
            factor = 1.0
        return factor if factor > 0 else 1.0

    def correlation(self, window: np.ndarray, period: int, norm: float = 1.0) -> float:
        m = self.max_lag
        diff = np.abs(window[:m] - window[period : period + m]).sum()
        return 1.0 - (float(diff) / norm) / m

    def scan(self, window: np.ndarray) -> CorrelationScan:
        config = self.config
        self.correlations.fill(np.nan)

        window_rms = rms(window)
        if window_rms < config.min_rms:
            return CorrelationScan(found=False, rms=window_rms, gated=True)

        norm = self.normalization(window, window_rms)
        min_corr = config.min_correlation
        min_increase = config.min_correlation_increase

        result = CorrelationScan(found=min_corr is None and min_increase is None, rms=window_rms)
        last_correlation = 1.0

        for period in self.periods:
            correlation = self.correlation(window, period, norm)
            self.correlations[period] = correlation

            if correlation < last_correlation:
                if min_corr is not None and result.best_correlation > min_corr:
                    result.found = True
                    break
                if min_increase is not None and (
                    result.best_correlation - result.worst_correlation > min_increase
                ):
                    result.found = True
                    break
                result.worst_correlation = correlation
                result.worst_period = period
            elif self.find_local_maximum or correlation > result.best_correlation:
                result.best_correlation = correlation
                result.best_period = period

            last_correlation = correlation

        return result

    def neighbors(self, period: int):
        """Correlations at ``period - 1`` and ``period + 1``, or None if either wasn't scanned."""
        if period - 1 < 0 or period + 1 > self.max_lag:
            return None
        below = self.correlations[period - 1]
        above = self.correlations[period + 1]
        if np.isnan(below) or np.isnan(above):
            return None
        return float(below), float(above)
