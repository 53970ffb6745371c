"""
Garden Map Backend — Marker Route Handlers
============================================

What:  The four marker endpoints under /api.
How:   Parses the JSON body into schema models, hands plain dicts to
       MarkerService, returns its result.
Who:   Called by the map client (gardenmap.client.MarkerApiClient).

The service instance lives on `app.state.marker_service` (set by
create_app), so each app built in tests gets its own store file.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status

from gardenmap.schemas.marker import (
    DeleteResponse,
    ErrorResponse,
    MarkerCreate,
    MarkerData,
    MarkerListResponse,
    MarkerResponse,
    MarkerUpdate,
)
from gardenmap.services.marker_service import MarkerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Markers"])


def get_marker_service(request: Request) -> MarkerService:
    return request.app.state.marker_service


def _data_dict(data: Optional[MarkerData]) -> Optional[Dict[str, Any]]:
    return data.to_record() if data is not None else None


@router.get(
    "/markers",
    response_model=MarkerListResponse,
    responses={500: {"description": "Marker file unreadable", "model": ErrorResponse}},
    summary="List all markers",
    description="Returns every stored marker keyed by its string-encoded ID.",
)
async def list_markers(
    service: MarkerService = Depends(get_marker_service),
) -> MarkerListResponse:
    return await service.list_markers()


@router.post(
    "/markers",
    response_model=MarkerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "latlng or data.name missing", "model": ErrorResponse},
        500: {"description": "Marker file unreadable or unwritable", "model": ErrorResponse},
    },
    summary="Create a marker",
    description=(
        "Stores a new marker. `latlng` and a non-empty `data.name` are required. "
        "The server assigns the ID (highest existing ID + 1, or 0)."
    ),
)
async def create_marker(
    body: MarkerCreate,
    service: MarkerService = Depends(get_marker_service),
) -> MarkerResponse:
    logger.debug("POST /api/markers body: %s", body.model_dump(by_alias=True, exclude_unset=True))
    latlng = body.latlng.model_dump() if body.latlng is not None else None
    return await service.create_marker(latlng=latlng, data=_data_dict(body.data))


@router.put(
    "/markers/{marker_id}",
    response_model=MarkerResponse,
    responses={
        400: {"description": "Neither latlng nor data given", "model": ErrorResponse},
        404: {"description": "Marker not found", "model": ErrorResponse},
        500: {"description": "Marker file unreadable or unwritable", "model": ErrorResponse},
    },
    summary="Update a marker",
    description=(
        "`latlng` replaces the stored position. `data` is merged into the stored "
        "data: sent keys overwrite, other keys are kept."
    ),
)
async def update_marker(
    marker_id: str,
    body: MarkerUpdate,
    service: MarkerService = Depends(get_marker_service),
) -> MarkerResponse:
    logger.debug(
        "PUT /api/markers/%s body: %s",
        marker_id,
        body.model_dump(by_alias=True, exclude_unset=True),
    )
    latlng = body.latlng.model_dump() if body.latlng is not None else None
    return await service.update_marker(marker_id, latlng=latlng, data=_data_dict(body.data))


@router.delete(
    "/markers/{marker_id}",
    response_model=DeleteResponse,
    responses={
        404: {"description": "Marker not found", "model": ErrorResponse},
        500: {"description": "Marker file unreadable or unwritable", "model": ErrorResponse},
    },
    summary="Delete a marker",
)
async def delete_marker(
    marker_id: str,
    service: MarkerService = Depends(get_marker_service),
) -> DeleteResponse:
    return await service.delete_marker(marker_id)
