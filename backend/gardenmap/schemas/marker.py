"""
Garden Map Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between map client and backend.
How:   FastAPI uses these models to parse request bodies, serialize responses,
       and generate the OpenAPI docs.
Who:   Used by route handlers and MarkerService.

Request models keep every field optional. Presence rules (latlng and
data.name on create, at least one field on update) are business rules
enforced by MarkerService so that they produce the same 400 message the
map client already knows how to show.

Wire names are camelCase (`plantedDate`, `infoLink`, `pictureRepo`); the
Python attributes are snake_case with aliases.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Shared Models
# ══════════════════════════════════════════════════════════════════════════


class LatLng(BaseModel):
    """
    What:  Marker position in image-pixel space (not geographic).
    How:   `lat` is the vertical axis and `lng` the horizontal one, the same
           convention the map widget uses for its simple CRS.

    Coordinates must be finite: JSON has no spelling for inf or NaN.
    """
    model_config = {"allow_inf_nan": False}

    lat: float = Field(description="Vertical image coordinate")
    lng: float = Field(description="Horizontal image coordinate")


class MarkerData(BaseModel):
    """
    What:  Descriptive payload attached to a marker.

    Only `name` matters to the server (required and non-empty on create).
    Unknown keys are kept, so whatever the client sends is stored.
    """
    name: Optional[str] = Field(default=None, description="Plant name")
    planted_date: Optional[str] = Field(
        default=None, alias="plantedDate", description="Free-form planting date"
    )
    logbook: Optional[str] = Field(default=None, description="Free-form notes")
    info_link: Optional[str] = Field(
        default=None, alias="infoLink", description="Link to plant information"
    )
    picture_repo: Optional[str] = Field(
        default=None, alias="pictureRepo", description="Where pictures of the plant live"
    )

    model_config = {"extra": "allow", "populate_by_name": True}

    def to_record(self) -> Dict[str, Any]:
        """Only the keys the client actually sent, under their wire names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class MarkerCreate(BaseModel):
    """Body of POST /api/markers."""
    latlng: Optional[LatLng] = Field(default=None, description="Where to place the marker")
    data: Optional[MarkerData] = Field(default=None, description="Marker details; name required")


class MarkerUpdate(BaseModel):
    """
    Body of PUT /api/markers/{id}.

    `latlng` replaces the stored position; `data` is merged key by key into
    the stored data.
    """
    latlng: Optional[LatLng] = Field(default=None, description="New position")
    data: Optional[MarkerData] = Field(default=None, description="Fields to overwrite")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class MarkerRecord(BaseModel):
    """One stored marker as it appears in the list response."""
    latlng: LatLng
    data: Dict[str, Any]


class MarkerResponse(MarkerRecord):
    """
    What:  A single marker with its server-assigned ID.
    Who:   Returned by POST (201) and PUT (200).
    """
    id: int = Field(description="Server-assigned marker ID")


# Keys are string-encoded integer IDs, exactly as stored on disk.
MarkerListResponse = Dict[str, MarkerRecord]


class DeleteResponse(BaseModel):
    """Confirmation returned by DELETE /api/markers/{id}."""
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Error envelope shared by every failing endpoint.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description, shown to the user by the map client
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    store: str = Field(description="Marker file state: readable, empty, unreadable")
    uptime_seconds: float = Field(description="Seconds since service started")
