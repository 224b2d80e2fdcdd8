"""
Host-side pitch detector.

``PitchDetector`` owns the worker that runs inside the audio callback and
the two channels connecting them. The host thread changes options, starts
and stops detection, and periodically calls ``poll()`` to collect results:

    detector = PitchDetector(sample_rate=44100, length=2048, min_note=40, max_note=84)
    with sd.InputStream(samplerate=44100, channels=1, callback=detector.callback):
        detector.start()
        while True:
            detector.poll()
            print(detector.note_string, detector.detune)

Options are validated here, synchronously, so configuration mistakes raise
``ConfigError`` in the caller instead of inside the audio callback.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import numpy as np

from .config import DetectorConfig
from .dsp import cents_off_from_pitch, frequency_to_note, frequency_to_string
from .events import Channel, ControlMessage, DebugUpdate, Event, SetOptions, Start, Stop, StatsUpdate
from .periods import PeriodSet, resolve_periods
from .pitch import DetectionResult, PitchEstimator
from .worker import PitchDetectorWorker

logger = logging.getLogger(__name__)

DetectCallback = Callable[[DetectionResult, "PitchDetector"], None]

EMPTY_RESULT = DetectionResult(
    detected=False,
    frequency=-1.0,
    best_period=0,
    worst_period=0,
    best_correlation=0.0,
    worst_correlation=0.0,
    rms=0.0,
    time=0.0,
)


class PitchDetector:
    def __init__(
        self,
        sample_rate: int,
        length: int = 1024,
        on_detect: Optional[DetectCallback] = None,
        on_debug: Optional[DetectCallback] = None,
        start: bool = False,
        queue_size: int = 256,
        **options,
    ):
        if on_debug is not None:
            options.setdefault("debug", True)
        self.config = DetectorConfig(sample_rate=sample_rate, length=length, **options)
        resolve_periods(self.config)

        self.on_detect = on_detect
        self.on_debug = on_debug
        self.control: Channel[ControlMessage] = Channel(maxsize=queue_size)
        self.events: Channel[Event] = Channel(maxsize=queue_size)
        self.worker: Optional[PitchDetectorWorker] = PitchDetectorWorker(self.config, self.control, self.events)

        self.stats = EMPTY_RESULT
        self.debug = EMPTY_RESULT
        self.periods: Optional[PeriodSet] = None
        self.correlations: Optional[np.ndarray] = None
        self._requested_state = False
        self._state_requests = 0

        if start:
            self.start()

    @property
    def callback(self) -> PitchDetectorWorker:
        """Audio callback accepted by ``sounddevice.InputStream``."""
        if self.worker is None:
            raise RuntimeError("PitchDetector has been destroyed")
        return self.worker

    def set_options(self, **options) -> DetectorConfig:
        """Merge ``options`` into the current configuration and hand it to the worker.

        Raises ``ConfigError`` without touching the running configuration if
        the result is invalid or resolves to no candidate periods. If the
        control channel is full the options are not applied and the current
        configuration is returned unchanged.
        """
        config = self.config.replace(**options)
        estimator = PitchEstimator(config)
        if not self.control.send(SetOptions(estimator)):
            logger.warning("Control channel full, detector options not applied: %s", options)
            return self.config
        self.config = config
        logger.debug("Queued detector options: %s", options)
        return config

    @property
    def started(self) -> bool:
        """Whether detection is running, or about to once the worker picks up the last start/stop."""
        if self.worker is None:
            return False
        if self._state_requests > self.worker.state_requests:
            return self._requested_state
        return self.worker.started

    def start(self) -> bool:
        return self._request_state(Start(), True)

    def stop(self) -> bool:
        return self._request_state(Stop(), False)

    def _request_state(self, message: ControlMessage, started: bool) -> bool:
        if not self.control.send(message):
            logger.warning("Control channel full, dropped %s", type(message).__name__)
            return False
        self._requested_state = started
        self._state_requests += 1
        return True

    def destroy(self) -> None:
        self.stop()
        self.worker = None
        self.periods = None
        self.correlations = None

    def process(self, frames: np.ndarray) -> Optional[DetectionResult]:
        """Feed samples directly, bypassing an audio stream (offline use and tests)."""
        return self.callback.process(frames)

    def poll(self) -> int:
        handled = 0
        for event in self.events.drain():
            if isinstance(event, StatsUpdate):
                self._on_stats(event.result)
            elif isinstance(event, DebugUpdate):
                self._on_debug(event)
            handled += 1
        return handled

    def _on_stats(self, result: DetectionResult) -> None:
        self.stats = result
        if self.on_detect is not None:
            self.on_detect(result, self)

    def _on_debug(self, event: DebugUpdate) -> None:
        snapshot = event.snapshot
        self.debug = snapshot.result
        self.periods = snapshot.periods
        self.correlations = snapshot.correlations
        if self.on_debug is not None:
            self.on_debug(snapshot.result, self)

    @property
    def frequency(self) -> float:
        return self.stats.frequency

    @property
    def period(self) -> int:
        return self.stats.best_period

    @property
    def correlation(self) -> float:
        return self.stats.best_correlation

    @property
    def correlation_increase(self) -> float:
        return self.stats.correlation_increase

    @property
    def note_number(self) -> Optional[int]:
        if self.stats.frequency <= 0:
            return None
        return frequency_to_note(self.stats.frequency)

    @property
    def note_string(self) -> Optional[str]:
        if self.stats.frequency <= 0:
            return None
        return frequency_to_string(self.stats.frequency)

    @property
    def detune(self) -> Optional[int]:
        """Cents between the last detected frequency and its nearest note."""
        note = self.note_number
        if note is None:
            return None
        return cents_off_from_pitch(self.stats.frequency, note)
