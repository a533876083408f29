"""Measurement endpoints: latency echo, download stream and upload sink.

All three share one admission budget per client through the router-level
rate limit dependency.
"""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from pinguen.core.config import settings
from pinguen.core.rate_limit import enforce_rate_limit
from pinguen.schemas.measurement import PingResponse, UploadResponse
from pinguen.services.measurement_service import drain_upload, iter_random_payload

logger = logging.getLogger(__name__)

RATE_LIMITED_RESPONSES = {429: {"description": "Rate limit exceeded"}}

router = APIRouter(
    tags=["Measurement"],
    dependencies=[Depends(enforce_rate_limit)],
    responses=RATE_LIMITED_RESPONSES,
)


def _declared_length(request: Request) -> int | None:
    raw = request.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@router.get("/ping", response_model=PingResponse)
async def ping() -> PingResponse:
    """Latency probe.

    Returns the server clock in nanoseconds. Clients time the round trip
    themselves; the timestamp lets them split it into legs if their clock is
    synchronized with the server.
    """
    return PingResponse(timestamp=time.time_ns())


@router.get(
    "/download",
    responses={200: {"content": {"application/octet-stream": {}}}},
)
def download() -> StreamingResponse:
    """Stream a fixed-size random payload for download throughput tests."""
    size = settings.app.download_size_bytes
    logger.debug("download.started", extra={"size_bytes": size})
    return StreamingResponse(
        iter_random_payload(size, settings.app.download_chunk_bytes),
        media_type="application/octet-stream",
        headers={"Content-Length": str(size)},
    )


@router.post("/upload", response_model=UploadResponse)
async def upload(request: Request) -> UploadResponse:
    """Receive and discard a client payload for upload throughput tests.

    Raises:
        ValidationAppError: 400 when the body is empty.
        HTTPException: 413 when the body exceeds APP_MAX_UPLOAD_SIZE_MB.
        MeasurementAppError: 500 when the body cannot be read.
    """
    result = await drain_upload(
        request.stream(),
        max_bytes=settings.app.max_upload_size_mb * 1024 * 1024,
        declared_length=_declared_length(request),
    )
    return UploadResponse(bytes_uploaded=result.bytes_uploaded, duration=result.duration_ms)
