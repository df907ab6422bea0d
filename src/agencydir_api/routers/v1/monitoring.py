"""Process metrics for the listing route."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from agencydir_shared.config import settings
from agencydir_shared.constants import AGENCIES_ROUTE

from agencydir_api.responses import NO_CACHE_HEADERS
from agencydir_api.utils.monitoring import error_rate_tracker

router = APIRouter(prefix="/monitoring", tags=["monitoring"])


@router.get("/metrics")
async def metrics() -> JSONResponse:
    """Error rates per route since process start."""
    error_rates = error_rate_tracker.get_all_error_rates()
    agencies = error_rates.get(AGENCIES_ROUTE, {})
    return JSONResponse(
        {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "errorRates": error_rates,
            "performance": {
                "agencies": {"requestCount": agencies.get("totalRequests", 0)},
            },
        },
        headers=NO_CACHE_HEADERS,
    )
