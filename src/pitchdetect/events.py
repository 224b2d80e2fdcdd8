"""
Messages exchanged between the host and the audio callback.

Control flows host -> worker (``SetOptions``, ``Start``, ``Stop``) and
results flow worker -> host (``StatsUpdate``, ``DebugUpdate``). Both
directions go through a ``Channel``; sending never blocks, so the audio
callback is never held up by a slow consumer.
"""

from __future__ import annotations

import queue
from dataclasses import dataclass
from typing import Generic, Iterator, Optional, TypeVar, Union

from .config import DetectorConfig
from .pitch import DebugSnapshot, DetectionResult, PitchEstimator


@dataclass(frozen=True)
class SetOptions:
    """A new configuration, with its period set and curve already built on the host."""

    estimator: PitchEstimator

    @property
    def config(self) -> DetectorConfig:
        return self.estimator.config


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Stop:
    pass


@dataclass(frozen=True)
class StatsUpdate:
    result: DetectionResult


@dataclass(frozen=True)
class DebugUpdate:
    snapshot: DebugSnapshot


ControlMessage = Union[SetOptions, Start, Stop]
Event = Union[StatsUpdate, DebugUpdate]

T = TypeVar("T")


class Channel(Generic[T]):
    """One-directional, fire-and-forget message queue.

    When the queue is full new messages are dropped and counted in
    ``dropped``; buffering beyond ``maxsize`` is the consumer's job.
    """

    def __init__(self, maxsize: int = 256):
        self._queue: "queue.Queue[T]" = queue.Queue(maxsize=maxsize)
        self.dropped = 0

    def send(self, message: T) -> bool:
        try:
            self._queue.put_nowait(message)
        except queue.Full:
            self.dropped += 1
            return False
        return True

    def receive(self, timeout: Optional[float] = None) -> Optional[T]:
        try:
            if timeout is None:
                return self._queue.get_nowait()
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> Iterator[T]:
        while True:
            try:
                yield self._queue.get_nowait()
            except queue.Empty:
                return

    def empty(self) -> bool:
        return self._queue.empty()
