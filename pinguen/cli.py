"""Command line entry point.

    pinguen serve                     # run the API under uvicorn
    pinguen measure --url URL         # run a speed test against a server
"""

from __future__ import annotations

import argparse
import logging
import sys

from pinguen.client.speedtest_client import DEFAULT_UPLOAD_SIZE, SpeedTestClient, SpeedTestError
from pinguen.core.config import settings

logger = logging.getLogger(__name__)


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "pinguen.main:app",
        host=args.host,
        port=args.port,
        timeout_graceful_shutdown=settings.server.shutdown_timeout_seconds,
        # Logging is configured by the app factory
        log_config=None,
        access_log=False,
    )
    return 0


def _measure(args: argparse.Namespace) -> int:
    try:
        with SpeedTestClient(args.url, timeout=args.timeout) as client:
            result = client.run(upload_size=args.upload_size)
    except SpeedTestError as exc:
        print(f"speed test failed: {exc}", file=sys.stderr)
        return 1

    print(f"ping:     {result.ping_ms:8.2f} ms")
    print(f"download: {result.download_mbps:8.2f} Mbps ({result.download_bytes} bytes)")
    print(f"upload:   {result.upload_mbps:8.2f} Mbps ({result.upload_bytes} bytes)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pinguen", description="Pinguen speed test server and client.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the speed test API server.")
    serve.add_argument("--host", default=settings.server.host, help="Bind address (default: %(default)s)")
    serve.add_argument("--port", type=int, default=settings.server.port, help="Bind port (default: %(default)s)")
    serve.set_defaults(func=_serve)

    measure = sub.add_parser("measure", help="Measure latency and throughput against a server.")
    measure.add_argument("--url", default=f"http://localhost:{settings.server.port}", help="Server base URL (default: %(default)s)")
    measure.add_argument("--timeout", type=float, default=30.0, help="Per-request timeout in seconds")
    measure.add_argument(
        "--upload-size",
        type=int,
        default=DEFAULT_UPLOAD_SIZE,
        help="Upload payload size in bytes (default: %(default)s)",
    )
    measure.set_defaults(func=_measure)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
