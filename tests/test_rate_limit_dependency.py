"""Tests for the admission gate dependency and its HTTP behavior."""

from unittest.mock import MagicMock, Mock, patch

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from pinguen.adapters.rate_limit.base import AbstractRateLimiter
from pinguen.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from pinguen.core.app_factory import create_app
from pinguen.core.rate_limit import client_identity, enforce_rate_limit


def _request(host: str | None = "203.0.113.7", port: int = 40000) -> MagicMock:
    request = MagicMock()
    request.url.path = "/ping"
    request.app.state.rate_limiter = Mock(spec=AbstractRateLimiter, limit=60, window_seconds=60.0)
    if host is None:
        request.client = None
    else:
        request.client.host = host
        request.client.port = port
    return request


class TestClientIdentity:
    def test_uses_host_and_port_by_default(self) -> None:
        assert client_identity(_request("203.0.113.7", 40000)) == "203.0.113.7:40000"

    @patch("pinguen.core.rate_limit.settings")
    def test_host_only_mode(self, mock_settings) -> None:
        mock_settings.app.rate_limit_identity = "host"

        assert client_identity(_request("203.0.113.7", 40000)) == "203.0.113.7"

    def test_missing_peer_is_unknown(self) -> None:
        assert client_identity(_request(host=None)) == "unknown"


class TestEnforceRateLimit:
    @pytest.mark.asyncio
    @patch("pinguen.core.rate_limit.settings")
    async def test_disabled_gate_never_consults_limiter(self, mock_settings) -> None:
        mock_settings.app.rate_limit_enabled = False
        request = _request()

        await enforce_rate_limit(request)

        request.app.state.rate_limiter.is_allowed.assert_not_called()

    @pytest.mark.asyncio
    async def test_allowed_request_passes_through(self) -> None:
        request = _request()
        request.app.state.rate_limiter.is_allowed.return_value = True

        await enforce_rate_limit(request)

        request.app.state.rate_limiter.is_allowed.assert_called_once_with("203.0.113.7:40000")

    @pytest.mark.asyncio
    async def test_rejected_request_raises_429_with_headers(self) -> None:
        request = _request()
        request.app.state.rate_limiter.is_allowed.return_value = False

        with pytest.raises(HTTPException) as exc_info:
            await enforce_rate_limit(request)

        assert exc_info.value.status_code == 429
        assert exc_info.value.detail == "Rate limit exceeded"
        assert exc_info.value.headers["Retry-After"] == "60"
        assert exc_info.value.headers["X-RateLimit-Limit"] == "60"

    @pytest.mark.asyncio
    @patch("pinguen.core.rate_limit.settings")
    async def test_headers_can_be_disabled(self, mock_settings) -> None:
        mock_settings.app.rate_limit_enabled = True
        mock_settings.app.rate_limit_identity = "address"
        mock_settings.app.rate_limit_include_headers = False
        request = _request()
        request.app.state.rate_limiter.is_allowed.return_value = False

        with pytest.raises(HTTPException) as exc_info:
            await enforce_rate_limit(request)

        assert exc_info.value.headers is None


class TestGateOverHttp:
    def test_sixty_first_request_is_rejected(self, client: TestClient) -> None:
        for _ in range(60):
            assert client.get("/ping").status_code == 200

        resp = client.get("/ping")

        assert resp.status_code == 429
        assert resp.json() == {"detail": "Rate limit exceeded"}
        assert resp.headers["Retry-After"] == "60"

    def test_budget_is_shared_across_measurement_endpoints(self, client: TestClient) -> None:
        for _ in range(59):
            client.get("/ping")
        assert client.post("/upload", content=b"x" * 10).status_code == 200

        assert client.get("/download").status_code == 429

    def test_window_slide_readmits_client(self, client: TestClient, clock: Mock) -> None:
        for _ in range(61):
            client.get("/ping")
        assert client.get("/ping").status_code == 429

        clock.return_value = 1061.0
        assert client.get("/ping").status_code == 200

    def test_handler_is_not_invoked_when_rejected(self, clock: Mock) -> None:
        limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)
        client = TestClient(create_app(rate_limiter=limiter))
        assert client.get("/ping").status_code == 200

        with patch("pinguen.api.routes.measurement.time") as mock_time:
            resp = client.get("/ping")

        assert resp.status_code == 429
        mock_time.time_ns.assert_not_called()

    def test_headers_reflect_the_limiter_in_use(self, clock: Mock) -> None:
        limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=10, clock=clock)
        client = TestClient(create_app(rate_limiter=limiter))

        statuses = [client.get("/ping").status_code for _ in range(3)]
        resp = client.get("/ping")

        assert statuses == [200, 200, 429]
        assert resp.headers["X-RateLimit-Limit"] == "2"
        assert resp.headers["X-RateLimit-Window"] == "10"
        assert resp.headers["Retry-After"] == "10"

    def test_status_is_never_rate_limited(self, client: TestClient, limiter) -> None:
        for _ in range(100):
            assert client.get("/status").status_code == 200

        assert len(limiter) == 0

    def test_gate_records_testclient_address(self, client: TestClient, limiter) -> None:
        client.get("/ping")

        assert limiter.recorded("testclient:50000") == 1
