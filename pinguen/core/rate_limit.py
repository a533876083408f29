"""Admission gate for the measurement endpoints.

Wires the rate limiting adapter into the HTTP layer as a FastAPI dependency.
This dependency is the only caller of ``AbstractRateLimiter.is_allowed``.

Strategy:
- One shared limiter, built by the application factory and stored on
  ``app.state.rate_limiter``.
- Identity is the peer address as seen by the server: ``host:port`` by
  default, or ``host`` alone when APP_RATE_LIMIT_IDENTITY=host.
"""

from __future__ import annotations

import logging
import math

from fastapi import HTTPException, Request, status

from pinguen.adapters.rate_limit.base import AbstractRateLimiter
from pinguen.core.config import settings
from pinguen.core.logging import fingerprint

logger = logging.getLogger(__name__)

UNKNOWN_IDENTITY = "unknown"


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter the application was built with."""
    return request.app.state.rate_limiter


def client_identity(request: Request) -> str:
    """Build the admission key for the current request.

    Args:
        request: FastAPI request.

    Returns:
        str: ``host:port``, ``host``, or ``"unknown"`` without peer info.
    """
    client = request.client
    if client is None or not client.host:
        return UNKNOWN_IDENTITY

    if settings.app.rate_limit_identity == "host":
        return client.host
    return f"{client.host}:{client.port}"


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing per-client admission.

    Every call records one attempt for the client. When the client is over
    budget the request ends here with HTTP 429 and the route handler never
    runs.

    Args:
        request: FastAPI request.

    Raises:
        HTTPException: 429 Too Many Requests when the client is over budget.
    """

    if not settings.app.rate_limit_enabled:
        return

    limiter = get_rate_limiter(request)
    identity = client_identity(request)

    if limiter.is_allowed(identity):
        logger.debug(
            "rate_limit.allowed",
            extra={
                "client_hash": fingerprint(identity),
                "path": request.url.path,
            },
        )
        return

    # Integer seconds for Retry-After; rounding up never readmits too early
    window_s = math.ceil(limiter.window_seconds)
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "client_hash": fingerprint(identity),
            "path": request.url.path,
            "limit": limiter.limit,
            "window_s": window_s,
        },
    )

    headers: dict[str, str] = {}
    if settings.app.rate_limit_include_headers:
        # Rejected attempts are recorded too, so only a full quiet window
        # guarantees readmission.
        headers["Retry-After"] = str(window_s)
        headers["X-RateLimit-Limit"] = str(limiter.limit)
        headers["X-RateLimit-Window"] = str(window_s)

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded",
        headers=headers or None,
    )
