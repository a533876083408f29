"""HTTP middleware: request correlation, access logging and cache headers.

The middleware:
- Accepts an incoming X-Request-ID header or generates a UUID
- Stores request_id in contextvars for the whole request lifecycle
- Echoes request_id and the total duration in response headers
- Marks every response as non-cacheable so measurements are never served
  from an intermediary cache
- Writes one ``request.completed`` access line per request, keyed by the
  same hashed client identity the admission gate uses
- Renders unexpected errors itself so 500s keep the headers above

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from pinguen.core.config import settings
from pinguen.core.exception_handlers import general_exception_handler
from pinguen.core.logging import clear_request_id, fingerprint, set_request_id
from pinguen.core.rate_limit import client_identity

logger = logging.getLogger("pinguen.access")


async def request_id_middleware(request: Request, call_next) -> Response:
    """Correlate, time and log a single request.

    For streaming responses (``/download``) the measured duration covers the
    handler up to the start of the body, not the transfer itself.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with correlation headers added.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            # Rendered here so the envelope still sees the request id
            response = await general_exception_handler(request, exc)
        duration_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "request.completed",
            extra={
                "client_hash": fingerprint(client_identity(request)),
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    response.headers["Cache-Control"] = "no-cache"
    return response
