"""Client admission (rate limiting) adapters.

The HTTP layer depends on ``AbstractRateLimiter`` only; the in-memory sliding
window limiter is the implementation wired in by the application factory.
"""

from pinguen.adapters.rate_limit.base import AbstractRateLimiter
from pinguen.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

__all__ = ["AbstractRateLimiter", "InMemorySlidingWindowRateLimiter"]
