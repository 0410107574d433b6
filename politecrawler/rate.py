import threading
import time
from typing import Callable


class RateLimiter:
    """Global pacing: successive acquisitions start at least 1/permits_per_second apart."""

    def __init__(self, permits_per_second: float, now: Callable[[], float] | None = None, sleep: Callable[[float], None] | None = None):
        if permits_per_second <= 0:
            raise ValueError("permits_per_second must be positive")
        self.interval = 1.0 / permits_per_second
        self._next_allowed = 0.0
        self._lock = threading.Lock()
        self._now = now or time.monotonic
        self._sleep = sleep or time.sleep

    def acquire(self) -> float:
        """Block until this caller's slot; returns the seconds slept."""
        with self._lock:
            now = self._now()
            slot = max(now, self._next_allowed)
            self._next_allowed = slot + self.interval
            sleep_for = slot - now
        if sleep_for > 0:
            self._sleep(sleep_for)
        return sleep_for
