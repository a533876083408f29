"""Tests for settings defaults and environment overrides."""

import pytest
from pydantic import ValidationError

from pinguen.core.config import AppSettings, LogSettings, ServerSettings


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("APP_DOWNLOAD_SIZE_BYTES", "APP_DOWNLOAD_CHUNK_BYTES", "APP_MAX_UPLOAD_SIZE_MB", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_app_defaults(clean_env) -> None:
    cfg = AppSettings()

    assert cfg.rate_limit_enabled is True
    assert cfg.rate_limit_requests == 60
    assert cfg.rate_limit_window_seconds == 60
    assert cfg.rate_limit_identity == "address"
    assert cfg.download_size_bytes == 10 * 1024 * 1024
    assert cfg.cors_origins == ["http://localhost:5173"]


def test_server_and_log_defaults(clean_env) -> None:
    assert ServerSettings().port == 8080
    assert ServerSettings().shutdown_timeout_seconds == 5
    assert LogSettings().request_id_header == "X-Request-ID"
    assert LogSettings().format == "json"


def test_env_overrides(clean_env) -> None:
    clean_env.setenv("APP_RATE_LIMIT_REQUESTS", "5")
    clean_env.setenv("APP_RATE_LIMIT_IDENTITY", "host")
    clean_env.setenv("APP_CORS_ALLOW_ORIGINS", "https://a.example, https://b.example,")

    cfg = AppSettings()

    assert cfg.rate_limit_requests == 5
    assert cfg.rate_limit_identity == "host"
    assert cfg.cors_origins == ["https://a.example", "https://b.example"]


@pytest.mark.parametrize(
    "name,value",
    [
        ("APP_RATE_LIMIT_REQUESTS", "0"),
        ("APP_RATE_LIMIT_WINDOW_SECONDS", "0"),
        ("APP_RATE_LIMIT_IDENTITY", "cookie"),
    ],
)
def test_invalid_values_are_rejected(clean_env, name: str, value: str) -> None:
    clean_env.setenv(name, value)

    with pytest.raises(ValidationError):
        AppSettings()
