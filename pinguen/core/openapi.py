"""OpenAPI metadata customization.

Adds tag descriptions and documents the admission headers returned with a
429 on the rate-limited measurement endpoints. Kept apart from the app
factory so documentation concerns stay out of app construction.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {
        "name": "Measurement",
        "description": "Latency and throughput probes. Subject to per-client rate limiting.",
    },
    {
        "name": "Health",
        "description": "Liveness check. Never rate limited.",
    },
]

_RATE_LIMIT_HEADERS = {
    "Retry-After": {
        "description": "Seconds to stay quiet before the client is guaranteed readmission.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Limit": {
        "description": "Requests allowed per window.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Window": {
        "description": "Window length in seconds.",
        "schema": {"type": "integer"},
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation with tags and 429 header docs."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for methods in schema.get("paths", {}).values():
            for operation in methods.values():
                if not isinstance(operation, dict):
                    continue
                throttled = operation.get("responses", {}).get("429")
                if throttled is not None:
                    throttled.setdefault("headers", dict(_RATE_LIMIT_HEADERS))

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
