"""
Fixed-window rate limiter for the HTTP entrypoint.

One counter per caller identity, reset wholesale when its window expires.
No sliding window and no token bucket: bursts straddling a window boundary
are accepted. State is per process and never shared across instances.
"""

import time
from dataclasses import dataclass
from typing import Callable


@dataclass
class RateLimitEntry:
    """Request count for one caller within the current window."""

    identifier: str
    count: int
    window_reset_at: float


class RateLimiter:
    """In-memory fixed-window counter keyed by caller identity."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}

    def allow(self, identifier: str, max_requests: int, window_seconds: float) -> bool:
        """
        Count a request and decide whether it may proceed.

        Args:
            identifier: Caller identity (client IP)
            max_requests: Requests allowed per window
            window_seconds: Window length

        Returns:
            True if the request is within quota
        """
        now = self._clock()
        entry = self._entries.get(identifier)

        if entry is None or now > entry.window_reset_at:
            self._entries[identifier] = RateLimitEntry(
                identifier=identifier,
                count=1,
                window_reset_at=now + window_seconds,
            )
            return True

        if entry.count < max_requests:
            entry.count += 1
            return True

        return False

    def __len__(self) -> int:
        return len(self._entries)
