"""Token pacing for outbound completion requests."""

from __future__ import annotations

import threading
import time
from typing import Callable

__all__ = ["RateLimiter"]


class RateLimiter:
    """
    Token bucket that paces callers to a steady ``rate`` per second.

    Up to ``burst`` tokens can accumulate while idle. ``take()`` reserves a
    token under the lock and sleeps outside of it, so waiters are admitted
    roughly in arrival order. There is no timeout and no cancellation.

    One instance is meant to be shared by every dispatcher in the process.
    """

    def __init__(
        self,
        rate: float,
        burst: int = 1,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")

        self.rate = float(rate)
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._tokens = float(burst)
        self._updated = clock()

    def take(self) -> float:
        """Block until a token is available. Returns the time spent waiting."""
        with self._lock:
            now = self._clock()
            elapsed = max(0.0, now - self._updated)
            self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
            self._updated = now

            wait = 0.0
            if self._tokens < 1.0:
                wait = (1.0 - self._tokens) / self.rate
            # may go negative: later callers wait for this reservation too
            self._tokens -= 1.0

        if wait > 0:
            self._sleep(wait)
        return wait

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rate={self.rate}, burst={self.burst})"
