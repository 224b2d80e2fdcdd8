"""
Candidate period resolution.

Turns the musical / frequency / period options of a ``DetectorConfig`` into
the ascending tuple of integer periods (in samples) the correlation scan
walks through. Resolved once per configuration and reused for every window.

Precedence, highest first:
    1. ``periods``: used verbatim.
    2. ``note``: a single period, widened by the scan margin.
    3. ``min_note`` / ``max_note``: each bounds the range (higher note -> shorter period).
    4. ``min_frequency`` / ``max_frequency``: same, in Hz.
    5. ``min_period`` / ``max_period``.
    6. defaults ``2`` and ``length // 2``.
"""

from __future__ import annotations

import math
from typing import Tuple

from .config import ConfigError, DetectorConfig
from .dsp import note_to_period

MIN_PERIOD = 2

PeriodSet = Tuple[int, ...]


def scan_margin(config: DetectorConfig) -> Tuple[int, int]:
    """Samples added below/above a narrow range so the scan sees both slopes of a peak."""
    if config.min_correlation_increase is not None:
        return 10, 1
    return 1, 1


def resolve_period_range(config: DetectorConfig) -> Tuple[int, int]:
    max_lag = config.max_lag
    sample_rate = config.sample_rate

    if config.note is not None:
        period = round(note_to_period(config.note, sample_rate))
        min_period, max_period = period, period
    else:
        if config.max_note is not None:
            min_period = round(note_to_period(config.max_note, sample_rate))
        elif config.max_frequency is not None:
            min_period = math.ceil(sample_rate / config.max_frequency)
        elif config.min_period is not None:
            min_period = int(config.min_period)
        else:
            min_period = MIN_PERIOD

        if config.min_note is not None:
            max_period = round(note_to_period(config.min_note, sample_rate))
        elif config.min_frequency is not None:
            max_period = math.floor(sample_rate / config.min_frequency)
        elif config.max_period is not None:
            max_period = int(config.max_period)
        else:
            max_period = max_lag

    if max_period < min_period:
        min_period, max_period = max_period, min_period

    below, above = scan_margin(config)
    if max_period - min_period < 1 + below + above:
        min_period -= below
        max_period += above

    return max(MIN_PERIOD, min_period), min(max_lag, max_period)


def resolve_periods(config: DetectorConfig) -> PeriodSet:
    """Candidate periods for ``config``; raises ``ConfigError`` if none remain."""
    if config.periods is not None:
        return config.periods

    min_period, max_period = resolve_period_range(config)
    if max_period < min_period:
        raise ConfigError(
            f"Period range resolves to nothing: [{min_period}, {max_period}] "
            f"for length={config.length}, sample_rate={config.sample_rate}"
        )
    return tuple(range(min_period, max_period + 1))
