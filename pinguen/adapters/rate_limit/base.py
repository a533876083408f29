"""Rate limiter interface.

The admission gate depends on this abstraction so the storage strategy can
change without touching the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractRateLimiter(ABC):
    """Interface for per-identity admission decisions."""

    @property
    @abstractmethod
    def limit(self) -> int:
        """Maximum number of requests admitted per window."""
        raise NotImplementedError

    @property
    @abstractmethod
    def window_seconds(self) -> float:
        """Length of the trailing window in seconds."""
        raise NotImplementedError

    @abstractmethod
    def is_allowed(self, identity: str) -> bool:
        """Record a request for ``identity`` and decide whether it is admitted.

        Implementations must never raise for any identity string, including
        the empty string.

        Args:
            identity: Caller-supplied client key (e.g. peer address).

        Returns:
            True when the request fits within the identity's budget.
        """
        raise NotImplementedError
