from __future__ import annotations

from typing import Optional

import numpy as np


class SampleWindow:
    """Fixed-capacity accumulator that turns streamed frames into analysis windows.

    Windows are adjacent, not sliding. The buffer is allocated once and the
    array returned by ``push`` is the same storage, so it is only valid until
    the next call.
    """

    def __init__(self, length: int):
        if length <= 0:
            raise ValueError(f"length must be positive, got {length}")
        self._buffer = np.zeros(length, dtype=np.float64)
        self._view = self._buffer.view()
        self._view.flags.writeable = False
        self._cursor = 0

    @property
    def length(self) -> int:
        return self._buffer.size

    @property
    def fill(self) -> int:
        return self._cursor

    def push(self, frames: np.ndarray) -> Optional[np.ndarray]:
        frames = np.asarray(frames).reshape(-1)
        count = min(frames.size, self._buffer.size - self._cursor)
        self._buffer[self._cursor : self._cursor + count] = frames[:count]
        self._cursor += count

        if self._cursor >= self._buffer.size:
            # Anything past the end of this push is dropped.
            self._cursor = 0
            return self._view
        return None

    def reset(self) -> None:
        self._cursor = 0
