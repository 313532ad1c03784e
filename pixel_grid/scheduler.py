# pixel_grid/scheduler.py
from __future__ import annotations

"""
Single-slot debounce timer for a cooperative, single-threaded loop.

Exports:
  Debouncer(delay=DEBOUNCE_SECONDS, clock=time.monotonic)
    .schedule(callback)  replace any pending callback, due after `delay`
    .cancel()            drop the pending callback
    .pending             True while a callback is waiting
    .poll()              run the callback if due; returns True if it ran
    .flush()             run the pending callback now; returns True if it ran

Nothing here starts threads. The owner calls poll() from its event loop, or
flush() when it needs the result immediately (batch/CLI use).
"""

import time
from typing import Callable, Optional

from .constants import DEBOUNCE_SECONDS

Clock = Callable[[], float]


class Debouncer:
    def __init__(self, delay: float = DEBOUNCE_SECONDS, clock: Clock = time.monotonic) -> None:
        self.delay = float(delay)
        self._clock = clock
        self._callback: Optional[Callable[[], None]] = None
        self._due: float = 0.0

    @property
    def pending(self) -> bool:
        return self._callback is not None

    @property
    def due_at(self) -> Optional[float]:
        return self._due if self._callback is not None else None

    def schedule(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._due = self._clock() + self.delay

    def cancel(self) -> None:
        self._callback = None

    def _fire(self) -> bool:
        callback = self._callback
        if callback is None:
            return False
        # Clear first so the callback may schedule again.
        self._callback = None
        callback()
        return True

    def poll(self) -> bool:
        if self._callback is None or self._clock() < self._due:
            return False
        return self._fire()

    def flush(self) -> bool:
        return self._fire()


__all__ = ["Debouncer", "Clock"]
