import pytest

from pitchdetect import PitchDetector
from pitchdetect.config import AudioConfig, ConfigError, DetectorConfig

from conftest import LENGTH, SAMPLE_RATE, make_sine


def test_defaults() -> None:
    config = DetectorConfig(sample_rate=44100, length=2048)
    assert config.min_rms == 0.01
    assert config.interpolate_frequency is True
    assert config.normalize is None
    assert config.stop_after_detection is False
    assert config.min_correlation is None
    assert config.min_correlation_increase is None
    assert config.max_lag == 1024


def test_config_is_immutable() -> None:
    config = DetectorConfig(sample_rate=44100, length=2048)
    with pytest.raises(AttributeError):
        config.min_rms = 0.5


def test_replace_returns_new_snapshot() -> None:
    config = DetectorConfig(sample_rate=44100, length=2048)
    updated = config.replace(min_rms=0.05, normalize="rms")
    assert updated.min_rms == 0.05
    assert updated.normalize == "rms"
    assert config.min_rms == 0.01


def test_replace_rejects_unknown_option() -> None:
    config = DetectorConfig(sample_rate=44100, length=2048)
    with pytest.raises(ConfigError, match="Unknown option"):
        config.replace(min_rmss=0.05)


def test_periods_list_is_stored_as_tuple() -> None:
    config = DetectorConfig(sample_rate=44100, length=2048, periods=[10, 20, 30])
    assert config.periods == (10, 20, 30)
    hash(config)


@pytest.mark.parametrize(
    "options, message",
    [
        ({"sample_rate": 0}, "sample_rate"),
        ({"length": 2}, "length"),
        ({"min_rms": -0.1}, "min_rms"),
        ({"normalize": "loudness"}, "normalize"),
        ({"min_correlation": float("nan")}, "min_correlation"),
        ({"min_frequency": 0.0}, "min_frequency"),
        ({"max_period": 0}, "max_period"),
        ({"periods": []}, "empty"),
        ({"periods": [30, 20]}, "ascending"),
        ({"periods": [1, 2, 3]}, r"\[2, 1024\]"),
        ({"periods": [100, 2000]}, r"\[2, 1024\]"),
    ],
)
def test_invalid_options_are_rejected(options: dict, message: str) -> None:
    base = {"sample_rate": 44100, "length": 2048}
    base.update(options)
    with pytest.raises(ConfigError, match=message):
        DetectorConfig(**base)


@pytest.mark.parametrize(
    "name",
    ["min_rms", "note", "min_note", "max_note", "min_frequency", "max_frequency", "min_period", "min_correlation_increase"],
)
@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_non_finite_options_are_rejected(name: str, value: float) -> None:
    with pytest.raises(ConfigError, match=f"{name} must be a finite number"):
        DetectorConfig(sample_rate=44100, length=2048, **{name: value})


def test_config_error_is_a_value_error() -> None:
    assert issubclass(ConfigError, ValueError)


def test_audio_defaults_bound_the_live_range() -> None:
    options = AudioConfig().detector_options()
    assert options == {
        "sample_rate": 44100,
        "min_frequency": 80.0,
        "max_frequency": 900.0,
        "min_correlation": 0.9,
        "normalize": "rms",
    }


def test_audio_defaults_detect_the_fundamental_not_a_subharmonic() -> None:
    detector = PitchDetector(length=LENGTH, start=True, **AudioConfig(sample_rate=SAMPLE_RATE).detector_options())
    detector.process(make_sine(440.0, LENGTH))
    assert detector.poll() == 1
    assert detector.period == 100
    assert detector.note_string == "A4"
    assert -5 <= detector.detune <= 5
