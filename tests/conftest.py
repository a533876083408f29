"""Pytest configuration and fixtures shared across all test modules.

Environment variables must be set before anything imports
``pinguen.core.config``, which reads them once at import time.
"""

import os

os.environ["APP_ENV"] = "testing"

# Small payloads keep the HTTP tests fast
os.environ.setdefault("APP_DOWNLOAD_SIZE_BYTES", str(256 * 1024))
os.environ.setdefault("APP_DOWNLOAD_CHUNK_BYTES", str(16 * 1024))
os.environ.setdefault("APP_MAX_UPLOAD_SIZE_MB", "1")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from pinguen.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from pinguen.core.app_factory import create_app


@pytest.fixture
def clock() -> Mock:
    """Controllable time source; tests move it by assigning return_value."""
    return Mock(return_value=1000.0)


@pytest.fixture
def limiter(clock: Mock) -> InMemorySlidingWindowRateLimiter:
    return InMemorySlidingWindowRateLimiter(limit=60, window_seconds=60, clock=clock)


@pytest.fixture
def client(limiter: InMemorySlidingWindowRateLimiter) -> TestClient:
    """Test client over a fresh app sharing the fake-clock limiter."""
    return TestClient(create_app(rate_limiter=limiter))
