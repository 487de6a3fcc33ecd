"""
Unit test fixtures: in-memory rate-limit store and a controllable clock.
"""

import threading
import time
from datetime import datetime, timedelta, timezone

import pytest


class InMemoryRateLimitStore:
    """
    RateLimitStore backed by a list of (ip, endpoint, at) events.

    A lock makes acquire() atomic like the database store. latency widens
    the gap between count and insert so unguarded races would show up.
    """

    def __init__(self, latency: float = 0.0) -> None:
        self.events: list[tuple[str, str, datetime]] = []
        self.latency = latency
        self._lock = threading.Lock()

    def acquire(
        self, ip: str, endpoint: str, at: datetime, window_start: datetime, max_requests: int
    ) -> bool:
        with self._lock:
            self.events = [
                e for e in self.events
                if not (e[0] == ip and e[1] == endpoint and e[2] < window_start)
            ]
            count = sum(1 for e in self.events if e[0] == ip and e[1] == endpoint)
            if self.latency:
                time.sleep(self.latency)
            if count >= max_requests:
                return False
            self.events.append((ip, endpoint, at))
            return True


class FakeClock:
    """Callable clock that only moves when advanced."""

    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def store() -> InMemoryRateLimitStore:
    return InMemoryRateLimitStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def slow_store() -> InMemoryRateLimitStore:
    return InMemoryRateLimitStore(latency=0.01)
