import math

import numpy as np

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")


def rms(frame: np.ndarray) -> float:
    if frame.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(frame.astype(np.float64) ** 2)))


def peak(frame: np.ndarray) -> float:
    if frame.size == 0:
        return 0.0
    return float(np.max(np.abs(frame)))


def note_to_frequency(note: float) -> float:
    return 440.0 * (2.0 ** ((note - 69.0) / 12.0))


def frequency_to_note(frequency: float) -> int:
    return int(round(12.0 * math.log2(frequency / 440.0))) + 69


def note_to_period(note: float, sample_rate: float) -> float:
    """Period in samples (fractional) of a MIDI note at ``sample_rate``."""
    return sample_rate / note_to_frequency(note)


def frequency_to_string(frequency: float) -> str:
    """Scientific pitch name of the nearest note, e.g. 440.0 -> 'A4'."""
    note = frequency_to_note(frequency)
    return f"{NOTE_NAMES[note % 12]}{(note - 12) // 12}"


def cents_off_from_pitch(frequency: float, note: int) -> int:
    return math.floor(1200.0 * math.log2(frequency / note_to_frequency(note)))
