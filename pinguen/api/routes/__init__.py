from __future__ import annotations

from pinguen.api.routes.health import router as health_router
from pinguen.api.routes.measurement import router as measurement_router

__all__ = ["health_router", "measurement_router"]
