"""HTTP client that runs a speed test against a Pinguen server.

Mirrors what the browser front end does: check /status, time one /ping,
stream /download while counting bytes, then POST a random payload to
/upload and derive throughput from the server-reported duration.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_SIZE = 2 * 1024 * 1024
_UPLOAD_CHUNK = 64 * 1024


class SpeedTestError(Exception):
    """Raised when the server is unreachable or a probe fails."""


@dataclass(frozen=True)
class SpeedTestResult:
    ping_ms: float
    download_mbps: float
    upload_mbps: float
    download_bytes: int
    upload_bytes: int


def mbps(num_bytes: int, seconds: float) -> float:
    """Convert a byte count over a duration to megabits per second."""
    if seconds <= 0:
        return 0.0
    return (num_bytes * 8) / (1_000_000 * seconds)


def random_payload(size: int) -> bytes:
    return b"".join(os.urandom(min(_UPLOAD_CHUNK, size - i)) for i in range(0, size, _UPLOAD_CHUNK))


class SpeedTestClient:
    """Runs latency and throughput probes against one server.

    Args:
        base_url: Server root, e.g. ``http://localhost:8080``.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> SpeedTestClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise SpeedTestError(f"{method} {path} failed: {exc}") from exc
        if response.status_code == 429:
            raise SpeedTestError(
                f"{path} rate limited; retry after {response.headers.get('Retry-After', '?')}s"
            )
        if response.is_error:
            raise SpeedTestError(f"{path} failed: HTTP {response.status_code}")
        return response

    def check_status(self) -> dict:
        return self._request("GET", "/status").json()

    def measure_ping(self) -> float:
        """Round-trip time of one /ping request, in milliseconds."""
        start = time.perf_counter()
        response = self._request("GET", "/ping")
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.json()
        return elapsed_ms

    def measure_download(self) -> tuple[float, int]:
        """Stream /download and return (Mbps, bytes received)."""
        total = 0
        start = time.perf_counter()
        try:
            with self._client.stream("GET", "/download") as response:
                if response.is_error:
                    raise SpeedTestError(f"/download failed: HTTP {response.status_code}")
                for chunk in response.iter_bytes():
                    total += len(chunk)
        except httpx.HTTPError as exc:
            raise SpeedTestError(f"GET /download failed: {exc}") from exc
        return mbps(total, time.perf_counter() - start), total

    def measure_upload(self, size: int = DEFAULT_UPLOAD_SIZE) -> tuple[float, int]:
        """POST ``size`` random bytes and return (Mbps, bytes acknowledged).

        Uses the server-side duration when it is non-zero, since it excludes
        connection setup; falls back to the client-side elapsed time.
        """
        payload = random_payload(size)
        start = time.perf_counter()
        response = self._request(
            "POST",
            "/upload",
            content=payload,
            headers={"Content-Type": "application/octet-stream"},
        )
        elapsed = time.perf_counter() - start
        body = response.json()
        uploaded = int(body["bytesUploaded"])
        server_seconds = int(body["duration"]) / 1000
        return mbps(uploaded, server_seconds or elapsed), uploaded

    def run(self, *, upload_size: int = DEFAULT_UPLOAD_SIZE) -> SpeedTestResult:
        self.check_status()
        ping_ms = self.measure_ping()
        download_mbps, download_bytes = self.measure_download()
        upload_mbps, upload_bytes = self.measure_upload(upload_size)

        result = SpeedTestResult(
            ping_ms=ping_ms,
            download_mbps=download_mbps,
            upload_mbps=upload_mbps,
            download_bytes=download_bytes,
            upload_bytes=upload_bytes,
        )
        logger.info(
            "speedtest.completed",
            extra={
                "ping_ms": round(ping_ms, 2),
                "download_mbps": round(download_mbps, 2),
                "upload_mbps": round(upload_mbps, 2),
            },
        )
        return result
