from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from pinguen.core.config import settings
from pinguen.schemas.measurement import StatusResponse

router = APIRouter(tags=["Health"])


@router.get("/status", response_model=StatusResponse)
def status_check() -> StatusResponse:
    """Health check endpoint.

    Never rate limited: clients poll it to decide whether the server is
    reachable before starting a measurement.
    """

    return StatusResponse(
        status="ok",
        version=settings.app.version,
        timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    )
