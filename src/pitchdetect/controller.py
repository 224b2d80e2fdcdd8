from __future__ import annotations

from enum import Enum


class DetectorState(Enum):
    STOPPED = "stopped"
    STARTED = "started"


class DetectionController:
    """Gates whether completed windows are analysed at all.

    Stopping only suppresses future analysis; frames keep being buffered.
    """

    def __init__(self, started: bool = False):
        self.state = DetectorState.STARTED if started else DetectorState.STOPPED

    @property
    def started(self) -> bool:
        return self.state is DetectorState.STARTED

    def start(self) -> None:
        self.state = DetectorState.STARTED

    def stop(self) -> None:
        self.state = DetectorState.STOPPED

    def notify_detection(self, stop_after_detection: bool) -> None:
        # One-shot mode.
        if stop_after_detection:
            self.stop()
