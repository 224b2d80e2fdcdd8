from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np

from .config import DetectorConfig
from .correlation import CorrelationEngine, CorrelationScan
from .periods import PeriodSet, resolve_periods

INTERPOLATION_GAIN = 8.0
MAX_SHIFT = 1.0


@dataclass(frozen=True)
class DetectionResult:
    detected: bool
    frequency: float
    best_period: int
    worst_period: int
    best_correlation: float
    worst_correlation: float
    rms: float
    time: float

    @property
    def correlation_increase(self) -> float:
        return self.best_correlation - self.worst_correlation


@dataclass(frozen=True)
class DebugSnapshot:
    result: DetectionResult
    periods: PeriodSet
    correlations: np.ndarray


class PitchEstimator:
    """Runs the correlation scan on a full window and turns it into a frequency.

    Built once per configuration; the period set is resolved here so a
    ``ConfigError`` surfaces before the estimator is ever used.
    """

    def __init__(self, config: DetectorConfig, periods: Optional[PeriodSet] = None):
        self.config = config
        self.periods = periods if periods is not None else resolve_periods(config)
        self.engine = CorrelationEngine(config, self.periods)

    def estimate(self, window: np.ndarray, time: float = 0.0) -> Tuple[DetectionResult, CorrelationScan]:
        scan = self.engine.scan(window)
        if not scan.accepted:
            return self._result(scan, detected=False, frequency=-1.0, time=time), scan

        frequency = self.config.sample_rate / (scan.best_period + self.interpolation_shift(scan))
        return self._result(scan, detected=True, frequency=frequency, time=time), scan

    def interpolation_shift(self, scan: CorrelationScan) -> float:
        """Sub-sample period correction from the neighbors of the best period.

        Leans towards the side with the stronger neighbor. Not a curve fit;
        clamped to one sample so the estimate stays between the neighbors.
        """
        if not self.config.interpolate_frequency or scan.best_correlation <= 0:
            return 0.0
        neighbors = self.engine.neighbors(scan.best_period)
        if neighbors is None:
            return 0.0
        below, above = neighbors
        shift = INTERPOLATION_GAIN * (above - below) / scan.best_correlation
        return float(np.clip(shift, -MAX_SHIFT, MAX_SHIFT))

    def snapshot(self, result: DetectionResult) -> DebugSnapshot:
        """Debug view of the last window.

        The frequency is always the uninterpolated ``sample_rate / best_period``
        (0 without a best period), detected or not; the interpolated value is
        only carried by the stats result.
        """
        frequency = self.config.sample_rate / result.best_period if result.best_period > 0 else 0.0
        result = replace(result, frequency=frequency)
        return DebugSnapshot(result=result, periods=self.periods, correlations=self.engine.correlations.copy())

    def _result(self, scan: CorrelationScan, detected: bool, frequency: float, time: float) -> DetectionResult:
        return DetectionResult(
            detected=detected,
            frequency=frequency,
            best_period=scan.best_period,
            worst_period=scan.worst_period,
            best_correlation=scan.best_correlation,
            worst_correlation=scan.worst_correlation,
            rms=scan.rms,
            time=time,
        )
