"""
Sliding-window rate limiter.

Counts events for an (ip, endpoint) pair in the trailing window ending now.
The store is the source of truth, so limits hold across processes. It
counts and records in one atomic step per key, so a concurrent burst gets
exactly max_requests through. A store outage never blocks signups: the
limiter fails open and logs the failure.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from .exceptions import StorageError
from .ports import RateLimitStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RateLimiter:
    """Per-IP, per-endpoint request budget."""

    store: RateLimitStore
    max_requests: int = 5
    window_seconds: int = 120
    clock: Callable[[], datetime] = field(default=_utcnow)

    def allow(self, ip: str, endpoint: str) -> bool:
        """
        Decide whether a request may proceed, recording it if so.

        Denied requests are not recorded, so a client that backs off is
        allowed again once its earlier requests leave the window.
        """
        now = self.clock()
        window_start = now - timedelta(seconds=self.window_seconds)

        try:
            allowed = self.store.acquire(
                ip,
                endpoint,
                at=now,
                window_start=window_start,
                max_requests=self.max_requests,
            )
        except StorageError:
            logger.warning("Rate limit check failed for %s on %s, allowing", ip, endpoint, exc_info=True)
            return True

        if not allowed:
            logger.info("Rate limit exceeded for %s on %s", ip, endpoint)
        return allowed
