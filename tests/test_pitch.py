import math

import numpy as np
import pytest

from pitchdetect.config import DetectorConfig
from pitchdetect.correlation import CorrelationScan
from pitchdetect.pitch import PitchEstimator

from conftest import LENGTH, SAMPLE_RATE, make_sine, one_octave_range


def make_estimator(**options) -> PitchEstimator:
    return PitchEstimator(DetectorConfig(sample_rate=SAMPLE_RATE, length=LENGTH, **options))


def cents(frequency: float, reference: float) -> float:
    return 1200 * math.log2(frequency / reference)


@pytest.mark.parametrize("freq", [220.0, 440.0, 880.0])
def test_pure_tone_within_five_cents(freq: float) -> None:
    estimator = make_estimator(**one_octave_range(freq))
    result, _ = estimator.estimate(make_sine(freq, LENGTH))

    assert result.detected
    assert abs(cents(result.frequency, freq)) < 5


def test_single_note_range(tone_440: np.ndarray) -> None:
    estimator = make_estimator(note=69)
    assert estimator.periods == (99, 100, 101)

    result, _ = estimator.estimate(tone_440)
    assert result.detected
    assert result.best_period == 100
    assert abs(cents(result.frequency, 440.0)) < 5


def test_without_interpolation_reports_integer_period(tone_440: np.ndarray) -> None:
    estimator = make_estimator(interpolate_frequency=False, **one_octave_range(440.0))
    result, _ = estimator.estimate(tone_440)

    assert result.detected
    assert result.best_period == 100
    assert result.frequency == pytest.approx(SAMPLE_RATE / 100)


def test_interpolation_moves_towards_true_period(tone_440: np.ndarray) -> None:
    estimator = make_estimator(**one_octave_range(440.0))
    result, scan = estimator.estimate(tone_440)
    shift = estimator.interpolation_shift(scan)

    # True period is 100.23 samples.
    assert 0 < shift < 1
    assert result.frequency < SAMPLE_RATE / 100


@pytest.mark.parametrize("freq", [196.0, 330.0, 415.3, 523.25, 740.0])
def test_interpolation_stays_between_neighbors(freq: float) -> None:
    estimator = make_estimator(**one_octave_range(freq))
    result, _ = estimator.estimate(make_sine(freq, LENGTH))

    assert result.detected
    bp = result.best_period
    assert SAMPLE_RATE / (bp + 1) <= result.frequency <= SAMPLE_RATE / (bp - 1)


def test_pathological_shift_is_clamped() -> None:
    estimator = make_estimator(min_period=90, max_period=110)
    estimator.engine.correlations[99] = 0.0
    estimator.engine.correlations[101] = 1.0
    scan = CorrelationScan(found=True, rms=0.5, best_period=100, best_correlation=0.1)
    assert estimator.interpolation_shift(scan) == 1.0


def test_missing_neighbor_means_no_shift() -> None:
    estimator = make_estimator(periods=[100, 101])
    estimator.engine.correlations[100] = 0.9
    estimator.engine.correlations[101] = 0.8
    scan = CorrelationScan(found=True, rms=0.5, best_period=100, best_correlation=0.9)
    assert estimator.interpolation_shift(scan) == 0.0


def test_silence_is_not_detected(silence: np.ndarray) -> None:
    estimator = make_estimator()
    result, scan = estimator.estimate(silence, time=1.5)

    assert scan.gated
    assert not result.detected
    assert result.frequency == -1.0
    assert result.rms == 0.0
    assert result.time == 1.5


def test_quiet_signal_is_gated() -> None:
    estimator = make_estimator(**one_octave_range(440.0))
    result, scan = estimator.estimate(make_sine(440.0, LENGTH, amplitude=0.005))
    assert scan.gated
    assert not result.detected


def test_min_rms_can_be_lowered() -> None:
    estimator = make_estimator(min_rms=0.001, **one_octave_range(440.0))
    result, _ = estimator.estimate(make_sine(440.0, LENGTH, amplitude=0.005))
    assert result.detected
    assert result.best_period == 100


def test_result_is_deterministic(tone_440: np.ndarray) -> None:
    estimator = make_estimator(**one_octave_range(440.0))
    first, _ = estimator.estimate(tone_440, time=0.25)
    first_snapshot = estimator.snapshot(first)
    second, _ = estimator.estimate(tone_440, time=0.25)
    second_snapshot = estimator.snapshot(second)

    assert first == second
    assert first_snapshot.correlations.tobytes() == second_snapshot.correlations.tobytes()


def test_snapshot_copies_curve(tone_440: np.ndarray, silence: np.ndarray) -> None:
    estimator = make_estimator(**one_octave_range(440.0))
    result, _ = estimator.estimate(tone_440)
    snapshot = estimator.snapshot(result)

    estimator.estimate(silence)
    assert snapshot.correlations[100] == result.best_correlation
    assert snapshot.periods == estimator.periods
    assert snapshot.result.frequency == pytest.approx(SAMPLE_RATE / 100)


def test_snapshot_of_missed_detection(silence: np.ndarray, tone_440: np.ndarray) -> None:
    estimator = make_estimator()
    result, _ = estimator.estimate(silence)
    assert estimator.snapshot(result).result.frequency == 0.0

    estimator = make_estimator(min_correlation=1.5, **one_octave_range(440.0))
    result, _ = estimator.estimate(tone_440)
    assert not result.detected
    snapshot = estimator.snapshot(result)
    assert not snapshot.result.detected
    assert snapshot.result.frequency == pytest.approx(SAMPLE_RATE / 100)
