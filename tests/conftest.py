from __future__ import annotations

import numpy as np
import pytest

SAMPLE_RATE = 44_100
LENGTH = 2048


def make_sine(freq: float, n: int, sample_rate: int = SAMPLE_RATE, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(n, dtype=np.float64) / sample_rate
    return amplitude * np.sin(2 * np.pi * freq * t)


def one_octave_range(freq: float) -> dict:
    """Frequency bounds that keep a single fundamental peak in the period range."""
    return {"min_frequency": freq / 1.4, "max_frequency": freq * 1.4}


@pytest.fixture
def tone_440() -> np.ndarray:
    return make_sine(440.0, LENGTH)


@pytest.fixture
def silence() -> np.ndarray:
    return np.zeros(LENGTH)
