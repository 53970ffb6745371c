"""
Garden Map Backend — Request Logging Middleware
=================================================

What:  One access line per marker API call: method, path, marker ID,
       status, duration, request ID.
How:   Times the downstream call and logs on the `gardenmap.access` logger,
       with the level chosen from the status class.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Example line:
    2024-05-02T09:14:03 [INFO] gardenmap.access: PUT /api/markers/3 200 4.2ms marker=3 [a1b2c3d4]

Request bodies are not logged here; MarkerService logs what changed.
Health checks and the API docs pages are not logged.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from gardenmap.middleware.request_id import request_id_var

logger = logging.getLogger("gardenmap.access")

MARKERS_PATH = "/api/markers"
QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def marker_id_from_path(path: str) -> Optional[str]:
    """`/api/markers/<id>` → "<id>" (as sent, may be invalid); None otherwise."""
    prefix = MARKERS_PATH + "/"
    if not path.startswith(prefix):
        return None
    segment = path[len(prefix):]
    if not segment or "/" in segment:
        return None
    return segment


def access_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Level by status: 5xx → ERROR, 4xx → WARNING, otherwise INFO."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        rid = request_id_var.get("")
        marker_id = marker_id_from_path(path)
        status = response.status_code

        logger.log(
            access_level(status),
            "%s %s %d %.1fms marker=%s [%s]",
            request.method,
            path,
            status,
            duration_ms,
            marker_id if marker_id is not None else "-",
            rid,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "marker_id": marker_id,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )

        return response
