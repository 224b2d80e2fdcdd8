from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

NORMALIZE_MODES = ("rms", "peak")
FINITE_OPTIONS = (
    "sample_rate",
    "min_rms",
    "min_correlation",
    "min_correlation_increase",
    "min_period",
    "max_period",
    "min_note",
    "max_note",
    "note",
    "min_frequency",
    "max_frequency",
)


class ConfigError(ValueError):
    """Raised when detector options cannot be turned into a usable configuration."""


@dataclass
class AudioConfig:
    sample_rate: int = 44100
    block_size: int = 128
    channels: int = 1
    device: Optional[Union[int, str]] = None
    min_freq: float = 80.0
    max_freq: float = 900.0
    corr_threshold: float = 0.9
    normalize: Optional[str] = "rms"

    def detector_options(self) -> dict:
        """Live-input defaults: a bounded range, early stop on the first strong peak."""
        return {
            "sample_rate": self.sample_rate,
            "min_frequency": self.min_freq,
            "max_frequency": self.max_freq,
            "min_correlation": self.corr_threshold,
            "normalize": self.normalize,
        }


@dataclass(frozen=True)
class DetectorConfig:
    """
    Immutable snapshot of the detector options.

    A new snapshot is built for every option change and swapped in whole
    between analysis windows, so a window is always scored against the
    configuration it was filled under.

    Only one of ``periods``, ``note``, ``min_note``/``max_note``,
    ``min_frequency``/``max_frequency`` or ``min_period``/``max_period``
    needs to be given; see ``periods.resolve_period_range`` for precedence.
    ``None`` means the option is off or unset.
    """

    sample_rate: int
    length: int
    min_rms: float = 0.01
    normalize: Optional[str] = None
    min_correlation: Optional[float] = None
    min_correlation_increase: Optional[float] = None
    interpolate_frequency: bool = True
    stop_after_detection: bool = False
    min_period: Optional[int] = None
    max_period: Optional[int] = None
    min_note: Optional[float] = None
    max_note: Optional[float] = None
    note: Optional[float] = None
    min_frequency: Optional[float] = None
    max_frequency: Optional[float] = None
    periods: Optional[Tuple[int, ...]] = None
    debug: bool = False

    def __post_init__(self) -> None:
        for name in FINITE_OPTIONS:
            value = getattr(self, name)
            if value is not None and not math.isfinite(value):
                raise ConfigError(f"{name} must be a finite number, got {value}")
        if self.sample_rate <= 0:
            raise ConfigError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.length < 4:
            raise ConfigError(f"length must be at least 4 samples, got {self.length}")
        if self.min_rms < 0:
            raise ConfigError(f"min_rms must be non-negative, got {self.min_rms}")
        if self.normalize is not None and self.normalize not in NORMALIZE_MODES:
            raise ConfigError(
                f"Unknown normalize mode {self.normalize!r}, valid options: {list(NORMALIZE_MODES)} or None"
            )
        for name in ("min_period", "max_period"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ConfigError(f"{name} must be positive, got {value}")
        for name in ("min_frequency", "max_frequency"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ConfigError(f"{name} must be positive, got {value}")
        if self.periods is not None:
            # Lists are accepted for convenience but the snapshot keeps a tuple.
            object.__setattr__(self, "periods", tuple(int(p) for p in self.periods))
            _check_explicit_periods(self.periods, self.max_lag)

    @property
    def max_lag(self) -> int:
        """Number of lags summed per period, also the largest testable period."""
        return self.length // 2

    def replace(self, **changes) -> "DetectorConfig":
        unknown = set(changes) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            raise ConfigError(f"Unknown option(s): {sorted(unknown)}")
        return dataclasses.replace(self, **changes)


def _check_explicit_periods(periods: Tuple[int, ...], max_lag: int) -> None:
    if not periods:
        raise ConfigError("periods must not be empty")
    for prev, cur in zip(periods, periods[1:]):
        if cur <= prev:
            raise ConfigError(f"periods must be strictly ascending, got {prev} before {cur}")
    if periods[0] < 2 or periods[-1] > max_lag:
        raise ConfigError(f"periods must lie within [2, {max_lag}], got [{periods[0]}, {periods[-1]}]")
