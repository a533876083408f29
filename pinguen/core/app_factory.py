"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and
the shared rate limiter) so tests can build isolated instances.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pinguen.adapters.rate_limit.base import AbstractRateLimiter
from pinguen.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from pinguen.api.routes import health_router, measurement_router
from pinguen.core.config import settings
from pinguen.core.exception_handlers import setup_exception_handlers
from pinguen.core.logging import configure_logging
from pinguen.core.middleware import request_id_middleware
from pinguen.core.openapi import apply_openapi_customizations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "server.startup",
        extra={
            "version": settings.app.version,
            "endpoints": sorted(
                r.path for r in app.routes if r.path in {"/ping", "/download", "/upload", "/status"}
            ),
            "rate_limit_enabled": settings.app.rate_limit_enabled,
            "rate_limit_requests": settings.app.rate_limit_requests,
            "rate_limit_window_s": settings.app.rate_limit_window_seconds,
        },
    )
    yield
    logger.info("server.shutdown")


def build_rate_limiter() -> AbstractRateLimiter:
    return InMemorySlidingWindowRateLimiter(
        limit=settings.app.rate_limit_requests,
        window_seconds=settings.app.rate_limit_window_seconds,
    )


def create_app(*, rate_limiter: AbstractRateLimiter | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Limiter shared by every gated request. Built from
            settings when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Pinguen Speed Test API",
        description=(
            "Measures latency (/ping), download throughput (/download) and upload "
            "throughput (/upload) between a client and this server. Measurement "
            "endpoints are rate limited per client address."
        ),
        version=settings.app.version,
        lifespan=lifespan,
    )

    if rate_limiter is None:
        rate_limiter = build_rate_limiter()
    app.state.rate_limiter = rate_limiter

    # Middleware: the last one added runs first, so CORS answers preflights
    # before correlation/logging and before the admission gate.
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    setup_exception_handlers(app)

    app.include_router(measurement_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
