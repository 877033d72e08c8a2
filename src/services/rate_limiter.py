from __future__ import annotations

import threading
import time
from typing import Callable


class FixedWindowRateLimiter:
    """Counts requests per fixed window; the counter resets once a full window has elapsed.

    Bursts straddling a window boundary can briefly let through up to twice the
    limit. Requests are counted even when rejected.
    """

    def __init__(
        self,
        *,
        limit: int = 60,
        window_seconds: float = 60.0,
        time_source: Callable[[], float] | None = None,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = float(window_seconds)
        self.time_source = time_source or time.monotonic
        self.window_start: float | None = None
        self.count = 0
        self._lock = threading.Lock()

    def reset(self) -> None:
        with self._lock:
            self.window_start = None
            self.count = 0

    def allow(self, now: float | None = None) -> bool:
        current = self.time_source() if now is None else now
        with self._lock:
            if self.window_start is None or current >= self.window_start + self.window_seconds:
                self.window_start = current
                self.count = 0
            self.count += 1
            return self.count <= self.limit


__all__ = ["FixedWindowRateLimiter"]
