from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .config import DetectorConfig
from .controller import DetectionController
from .events import Channel, ControlMessage, DebugUpdate, Event, SetOptions, Start, Stop, StatsUpdate
from .pitch import DetectionResult, PitchEstimator
from .window import SampleWindow

logger = logging.getLogger(__name__)


class SampleClock:
    """Stream time derived from the number of samples received."""

    def __init__(self, sample_rate: int):
        self.sample_rate = sample_rate
        self.samples = 0

    @property
    def time_s(self) -> float:
        return self.samples / self.sample_rate

    def advance(self, frames: int) -> float:
        self.samples += frames
        return self.time_s


class PitchDetectorWorker:
    """The audio-callback side of the detector.

    Everything here runs on the audio thread, one callback at a time. Control
    messages are picked up at the start of each callback; a new configuration
    is staged and only swapped in when the sample window is empty, so a window
    is never scored against options it was not filled under.
    """

    def __init__(
        self,
        config: DetectorConfig,
        control: Channel[ControlMessage],
        events: Channel[Event],
        started: bool = False,
    ):
        self.control = control
        self.events = events
        self.controller = DetectionController(started=started)
        self.config = config
        self.estimator = PitchEstimator(config)
        self.window = SampleWindow(config.length)
        self.clock = SampleClock(config.sample_rate)
        self.status_errors = 0
        self.state_requests = 0
        self._pending: Optional[PitchEstimator] = None

    @property
    def started(self) -> bool:
        return self.controller.started

    def handle(self, message: ControlMessage) -> None:
        if isinstance(message, SetOptions):
            self._pending = message.estimator
        elif isinstance(message, Start):
            self.controller.start()
            self.state_requests += 1
        elif isinstance(message, Stop):
            self.controller.stop()
            self.state_requests += 1
        else:
            raise TypeError(f"Unknown control message: {message!r}")

    def process(self, frames: np.ndarray) -> Optional[DetectionResult]:
        """Consume one block of mono samples; returns the result if a window was analysed."""
        for message in self.control.drain():
            self.handle(message)
        if self._pending is not None and self.window.fill == 0:
            self._apply(self._pending)

        frames = np.asarray(frames).reshape(-1)
        window = self.window.push(frames)
        now = self.clock.advance(frames.size)
        if window is None or not self.controller.started:
            return None
        return self._analyse(window, now)

    def __call__(self, indata: np.ndarray, frames: int, time_info, status) -> None:
        if status:
            self.status_errors += 1
            return
        self.process(indata[:, 0])

    def _analyse(self, window: np.ndarray, now: float) -> DetectionResult:
        config = self.config
        result, _ = self.estimator.estimate(window, time=now)

        if result.detected:
            self.controller.notify_detection(config.stop_after_detection)
            self.events.send(StatsUpdate(result))
        if config.debug:
            self.events.send(DebugUpdate(self.estimator.snapshot(result)))
        return result

    def _apply(self, estimator: PitchEstimator) -> None:
        config = estimator.config
        if config.length != self.window.length:
            self.window = SampleWindow(config.length)
        if config.sample_rate != self.clock.sample_rate:
            self.clock = SampleClock(config.sample_rate)
        self.config = config
        self.estimator = estimator
        self._pending = None
        logger.debug("Applied detector options: %d candidate periods", len(estimator.periods))
