"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: one lock makes prune, record and decide a single atomic step.
- Record-then-reject: a rejected attempt is still stored and keeps counting
  against the identity until it ages out of the window.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable

from pinguen.adapters.rate_limit.base import AbstractRateLimiter


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Admit at most ``limit`` requests per identity in any trailing window.

    Each identity maps to the timestamps of its requests inside the window.
    Stale timestamps are dropped lazily, only when that same identity is
    checked again; there is no background sweep. An identity whose history
    is entirely stale is removed before the current attempt is recorded.
    """

    def __init__(
        self,
        *,
        limit: int = 60,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of requests admitted per window.
            window_seconds: Length of the trailing window in seconds.
            clock: Time source in seconds; must not go backwards within a run.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._requests: dict[str, deque[float]] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._requests)

    def _prune_locked(self, identity: str, now: float) -> None:
        timestamps = self._requests.get(identity)
        if timestamps is None:
            return

        cutoff = now - self._window_seconds
        # Oldest first, so stale entries are always at the left
        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()

        if not timestamps:
            del self._requests[identity]

    def is_allowed(self, identity: str) -> bool:
        """Prune stale history, record this attempt, then compare to the limit.

        The 61st request inside a 60-per-window budget is the first one
        rejected, and it still occupies a slot for later requests.
        """
        with self._lock:
            now = self._clock()
            self._prune_locked(identity, now)
            timestamps = self._requests.setdefault(identity, deque())
            timestamps.append(now)
            return len(timestamps) <= self._limit

    def recorded(self, identity: str) -> int:
        """Number of timestamps currently stored for ``identity``.

        Read-only: neither prunes nor records.
        """
        with self._lock:
            timestamps = self._requests.get(identity)
            return len(timestamps) if timestamps is not None else 0
