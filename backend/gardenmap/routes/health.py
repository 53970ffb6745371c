"""
Garden Map Backend — Health Check Route
=========================================

What:  Liveness endpoint that also reports whether the marker file is readable.
Who:   Called by process supervisors and by people checking the server is up.

Status levels:
    - healthy:   marker file readable, or absent (fresh deployment)
    - degraded:  marker file present but unreadable or malformed
"""

import logging
import time

from fastapi import APIRouter, Depends

from gardenmap import __version__
from gardenmap.exceptions import StoreReadError
from gardenmap.routes.markers import get_marker_service
from gardenmap.schemas.marker import HealthResponse
from gardenmap.services.marker_service import MarkerService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    service: MarkerService = Depends(get_marker_service),
) -> HealthResponse:
    store_status = "readable"
    overall = "healthy"

    if not service.store.path.exists():
        store_status = "empty"
    else:
        try:
            await service.store.load()
        except StoreReadError as e:
            store_status = "unreadable"
            overall = "degraded"
            logger.warning("Health check: marker file unreadable: %s", e.context)

    return HealthResponse(
        status=overall,
        version=__version__,
        store=store_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
