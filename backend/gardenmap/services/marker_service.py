"""
Garden Map Backend — Marker Service (Business Rules)
======================================================

What:  List, create, update, and delete markers against the MarkerStore.
How:   Every call runs a full load → mutate → save cycle; nothing is cached
       between calls.
Who:   Called by the /api/markers route handlers.

Rules:
    - Create needs latlng, data, and a non-empty data.name.
    - New ID = max(existing IDs) + 1, or 0 for an empty store. Only IDs
      currently in the file count, so deleting the highest ID lets the next
      create reuse it.
    - Update: latlng replaces the stored position; data is merged key by key
      (sent keys overwrite, missing keys stay). A key cannot be removed.
    - Validation runs before the store is touched.

Write Serialization:
    With settings.serialize_writes on, mutations share one asyncio.Lock, so
    overlapping requests in this process run their cycles back to back.
    Reads never wait on it. Separate processes sharing a file are not
    coordinated.
"""

import asyncio
import contextlib
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from gardenmap.config import settings
from gardenmap.exceptions import NotFoundError, StoreReadError, ValidationError
from gardenmap.schemas.marker import (
    DeleteResponse,
    MarkerListResponse,
    MarkerRecord,
    MarkerResponse,
)
from gardenmap.services.marker_store import MarkerStore, Markers

logger = logging.getLogger(__name__)


def next_marker_id(markers: Markers) -> int:
    """Highest current ID plus one, or 0 when there are no markers."""
    return max(markers) + 1 if markers else 0


def parse_marker_id(raw_id: str) -> Optional[int]:
    """
    Convert a path segment to a marker ID.

    Returns None when the segment cannot name a stored marker. Only the
    canonical spelling counts: "7" names marker 7, "007" and " 7" name nothing.
    """
    if not (raw_id.isascii() and raw_id.isdigit()):
        return None
    marker_id = int(raw_id)
    if str(marker_id) != raw_id:
        return None
    return marker_id


class MarkerService:
    """
    Business logic layer for marker operations.

    Responsibilities:
        - list_markers(): full mapping, string keys
        - create_marker(): validation + ID assignment
        - update_marker(): position replace / data merge
        - delete_marker(): remove exactly one record
    """

    def __init__(self, store: MarkerStore, serialize_writes: Optional[bool] = None):
        self.store = store
        if serialize_writes is None:
            serialize_writes = settings.serialize_writes
        self.serialize_writes = serialize_writes
        self._write_lock = asyncio.Lock()

    def _writing(self):
        if self.serialize_writes:
            return self._write_lock
        return contextlib.nullcontext()

    def _checked(self, marker_id: int, record: Any) -> MarkerRecord:
        """Validate a record as loaded from the file; a bad one is a read error."""
        try:
            return MarkerRecord.model_validate(record)
        except PydanticValidationError as e:
            logger.error("Stored marker %d is malformed: %s", marker_id, str(e))
            raise StoreReadError(
                context={"path": str(self.store.path), "marker_id": marker_id, "error": str(e)}
            )

    async def list_markers(self) -> MarkerListResponse:
        markers = await self.store.load()
        return {
            str(marker_id): self._checked(marker_id, record)
            for marker_id, record in markers.items()
        }

    async def create_marker(
        self,
        latlng: Optional[Dict[str, Any]],
        data: Optional[Dict[str, Any]],
    ) -> MarkerResponse:
        """
        Store a new marker and assign its ID.

        Raises:
            ValidationError: latlng or data missing, or data.name empty (→ 400)
            StoreReadError / StoreWriteError: file failure (→ 500)
        """
        if latlng is None or data is None or not data.get("name"):
            raise ValidationError(
                message="Missing required marker data (latlng, data.name).",
                field="data.name" if latlng is not None and data is not None else None,
            )

        async with self._writing():
            markers = await self.store.load()
            marker_id = next_marker_id(markers)
            markers[marker_id] = {"latlng": latlng, "data": data}
            await self.store.save(markers)

        logger.info("Marker %d created successfully.", marker_id)
        return MarkerResponse(id=marker_id, latlng=latlng, data=data)

    async def update_marker(
        self,
        raw_id: str,
        latlng: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> MarkerResponse:
        """
        Replace the position and/or merge data into an existing marker.

        Raises:
            ValidationError: neither latlng nor data given (→ 400)
            NotFoundError: no marker with that ID (→ 404)
            StoreReadError: the stored record is malformed (→ 500)
        """
        if latlng is None and data is None:
            raise ValidationError(message="No update data provided (latlng or data).")

        marker_id = parse_marker_id(raw_id)
        if marker_id is None:
            raise NotFoundError(resource_id=raw_id)

        async with self._writing():
            markers = await self.store.load()
            if marker_id not in markers:
                raise NotFoundError(resource_id=raw_id)
            record = markers[marker_id]
            current = self._checked(marker_id, record)

            if latlng is not None:
                record["latlng"] = latlng
            if data is not None:
                record["data"] = {**current.data, **data}

            await self.store.save(markers)

        logger.info("Marker %d updated successfully.", marker_id)
        return MarkerResponse(id=marker_id, latlng=record["latlng"], data=record["data"])

    async def delete_marker(self, raw_id: str) -> DeleteResponse:
        """
        Remove one marker.

        Raises:
            NotFoundError: no marker with that ID (→ 404)
        """
        marker_id = parse_marker_id(raw_id)
        if marker_id is None:
            raise NotFoundError(resource_id=raw_id)

        async with self._writing():
            markers = await self.store.load()
            if marker_id not in markers:
                raise NotFoundError(resource_id=raw_id)
            del markers[marker_id]
            await self.store.save(markers)

        logger.info("Marker %d deleted successfully.", marker_id)
        return DeleteResponse(message=f"Marker {marker_id} deleted successfully.")
