"""Shared test helpers."""

from __future__ import annotations

TEST_BUCKET = "test-bucket"
TEST_TTL = 60.0


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
