from .config import AudioConfig, ConfigError, DetectorConfig
from .detector import PitchDetector
from .dsp import cents_off_from_pitch, frequency_to_note, frequency_to_string, note_to_frequency, note_to_period
from .pitch import DebugSnapshot, DetectionResult, PitchEstimator

__all__ = [
    "AudioConfig",
    "ConfigError",
    "DebugSnapshot",
    "DetectionResult",
    "DetectorConfig",
    "PitchDetector",
    "PitchEstimator",
    "cents_off_from_pitch",
    "frequency_to_note",
    "frequency_to_string",
    "note_to_frequency",
    "note_to_period",
]
