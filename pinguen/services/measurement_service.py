"""Payload generation and upload draining for throughput measurement.

Both operations stream: the download payload is produced chunk by chunk and
the upload body is counted and discarded as it arrives, so memory use stays
bounded by the chunk size regardless of the transfer size.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import AsyncIterator, Iterator

from fastapi import HTTPException, status
from starlette.requests import ClientDisconnect

from pinguen.core.errors import MeasurementAppError, ValidationAppError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    bytes_uploaded: int
    duration_ms: int


def iter_random_payload(size: int, chunk_size: int) -> Iterator[bytes]:
    """Yield exactly ``size`` random bytes in chunks of at most ``chunk_size``.

    Random data defeats transparent compression along the path, which would
    otherwise inflate the measured throughput.

    Args:
        size: Total number of bytes to produce.
        chunk_size: Upper bound for each chunk.

    Raises:
        ValueError: If size is negative or chunk_size is not positive.
    """
    if size < 0:
        raise ValueError("size must be >= 0")
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")

    remaining = size
    while remaining > 0:
        n = min(chunk_size, remaining)
        try:
            chunk = os.urandom(n)
        except OSError as exc:
            logger.error("download.payload_failed", extra={"error_msg": str(exc)})
            raise MeasurementAppError(
                code="payload_generation_failed",
                message="Could not generate download payload",
            ) from exc
        remaining -= n
        yield chunk


async def drain_upload(
    stream: AsyncIterator[bytes],
    *,
    max_bytes: int,
    declared_length: int | None = None,
) -> UploadResult:
    """Read and discard an upload body, measuring size and elapsed time.

    Args:
        stream: Async iterator over the request body chunks.
        max_bytes: Largest accepted body size.
        declared_length: Value of the Content-Length header, if any.

    Returns:
        UploadResult with the number of bytes received and the duration.

    Raises:
        ValidationAppError: If the body is empty.
        HTTPException: 413 if the body exceeds ``max_bytes``.
        MeasurementAppError: If the client stream breaks mid-transfer.
    """
    if declared_length == 0:
        raise ValidationAppError(code="empty_body", message="Request body is empty")

    if declared_length is not None and declared_length > max_bytes:
        logger.warning(
            "upload.rejected_by_header",
            extra={"declared_length": declared_length, "max_bytes": max_bytes},
        )
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Upload too large. Maximum size: {max_bytes} bytes",
        )

    start = time.perf_counter()
    received = 0
    try:
        async for chunk in stream:
            received += len(chunk)
            if received > max_bytes:
                logger.warning(
                    "upload.rejected_by_stream",
                    extra={"bytes_received": received, "max_bytes": max_bytes},
                )
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail=f"Upload too large. Maximum size: {max_bytes} bytes",
                )
    except ClientDisconnect as exc:
        logger.warning("upload.client_disconnected", extra={"bytes_received": received})
        raise MeasurementAppError(
            code="upload_read_failed",
            message="Failed to read upload data",
            details={"bytes_received": received},
        ) from exc

    duration_ms = int((time.perf_counter() - start) * 1000)

    if received == 0:
        raise ValidationAppError(code="empty_body", message="Request body is empty")

    logger.info(
        "upload.completed",
        extra={"bytes_uploaded": received, "duration_ms": duration_ms},
    )
    return UploadResult(bytes_uploaded=received, duration_ms=duration_ms)
