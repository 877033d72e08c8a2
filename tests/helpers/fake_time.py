from __future__ import annotations


class FakeTime:
    """Controllable monotonic clock usable as a ``time_source``."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def set(self, value: float) -> None:
        self.now = float(value)

    def advance(self, seconds: float) -> None:
        self.now += float(seconds)
