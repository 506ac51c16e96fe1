"""Throttle remote calls after a recent failure."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class FailureCooldown:
    """Remembers when the last remote failure happened.

    Best-effort throttle: concurrent callers race, last write wins.
    The lock is only held for the point read or write.
    """

    def __init__(self, duration: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.duration = duration
        self._clock = clock
        self._last_failure_at: float | None = None
        self._lock = threading.Lock()

    def in_cooldown(self) -> bool:
        with self._lock:
            last = self._last_failure_at
        return last is not None and self._clock() - last < self.duration

    def mark_failure_now(self) -> None:
        now = self._clock()
        with self._lock:
            self._last_failure_at = now

    def clear_failure(self) -> None:
        with self._lock:
            self._last_failure_at = None

    @property
    def last_failure_at(self) -> float | None:
        with self._lock:
            return self._last_failure_at
