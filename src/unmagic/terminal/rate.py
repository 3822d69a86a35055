"""Sliding-window event rate monitor (used for the canvas FPS readout)."""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable


class Rate:
    """Counts events and reports events-per-second over a trailing window.

    ``record_event`` is called from the render thread while ``current_rate``
    is typically read from other threads, so both take a lock.
    """

    def __init__(
        self,
        window: float = 1.0,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        if window <= 0:
            raise ValueError(f"window must be positive, got {window}")
        self._window = window
        self._clock = clock
        self._events: deque[float] = deque()
        self._total = 0
        self._lock = threading.Lock()

    @property
    def window(self) -> float:
        return self._window

    @property
    def count(self) -> int:
        """Total number of events recorded since creation or ``reset``."""
        with self._lock:
            return self._total

    def record_event(self) -> None:
        now = self._clock()
        with self._lock:
            self._events.append(now)
            self._total += 1
            self._prune(now)

    @property
    def current_rate(self) -> float:
        """Events per second over the trailing window."""
        now = self._clock()
        with self._lock:
            self._prune(now)
            return len(self._events) / self._window

    def reset(self) -> None:
        with self._lock:
            self._events.clear()
            self._total = 0

    def _prune(self, now: float) -> None:
        cutoff = now - self._window
        while self._events and self._events[0] <= cutoff:
            self._events.popleft()
