"""Tests for the ``pinguen`` command line entry point."""

from unittest.mock import patch

import pytest

from pinguen.cli import build_parser, main
from pinguen.client.speedtest_client import SpeedTestError, SpeedTestResult


def test_serve_runs_uvicorn_with_graceful_shutdown() -> None:
    with patch("uvicorn.run") as run:
        assert main(["serve", "--host", "127.0.0.1", "--port", "9090"]) == 0

    args, kwargs = run.call_args
    assert args == ("pinguen.main:app",)
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9090
    assert kwargs["timeout_graceful_shutdown"] == 5


def test_serve_defaults_to_port_8080() -> None:
    args = build_parser().parse_args(["serve"])

    assert args.port == 8080


def test_measure_prints_results(capsys) -> None:
    result = SpeedTestResult(
        ping_ms=12.5, download_mbps=93.1, upload_mbps=40.0, download_bytes=10, upload_bytes=20
    )
    with patch("pinguen.cli.SpeedTestClient") as client_cls:
        client_cls.return_value.__enter__.return_value.run.return_value = result
        assert main(["measure", "--url", "http://speed.test"]) == 0

    client_cls.assert_called_once_with("http://speed.test", timeout=30.0)
    out = capsys.readouterr().out
    assert "12.50 ms" in out
    assert "93.10 Mbps" in out


def test_measure_failure_exits_nonzero(capsys) -> None:
    with patch("pinguen.cli.SpeedTestClient") as client_cls:
        client_cls.return_value.__enter__.return_value.run.side_effect = SpeedTestError("down")
        assert main(["measure"]) == 1

    assert "down" in capsys.readouterr().err


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        main([])
