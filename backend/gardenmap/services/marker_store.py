"""
Garden Map Backend — Marker Store (JSON File Persistence)
===========================================================

What:  Loads and saves the full marker mapping from one JSON file.
How:   Async file I/O via aiofiles; writes go to a sibling temp file that is
       then renamed over the target, so readers never see half a file.
Who:   Called by MarkerService at the start and end of every operation.

File Format:
    {
      "0": {"latlng": {"lat": 120.5, "lng": 310.0}, "data": {"name": "Rose"}},
      "3": {"latlng": {"lat": 42.0, "lng": 77.0}, "data": {"name": "Basil"}}
    }

    Keys are string-encoded integer IDs; in memory they are ints. A missing
    file is an empty garden.

There is no partial update. Every mutation is "load the whole mapping,
change it in memory, save the whole mapping".
"""

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles

from gardenmap.config import settings
from gardenmap.exceptions import StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)

Markers = Dict[int, Dict[str, Any]]


class MarkerStore:
    """
    Durable mapping from marker ID to marker record.

    The store keeps no state between calls apart from the file path: each
    `load()` reads the file again, so a load always reflects the last
    successful `save()`.
    """

    def __init__(self, path: Optional[str] = None):
        """
        Args:
            path: Override the backing file (used in tests).
                  If None, uses settings.markers_file.
        """
        self.path = Path(path or settings.markers_file).resolve()
        logger.info("MarkerStore initialized with path=%s", self.path)

    async def load(self) -> Markers:
        """
        Read the full marker mapping.

        Returns:
            Dict keyed by integer ID. Empty when the file does not exist.

        Raises:
            StoreReadError: File unreadable, not JSON, not an object, or a
                key that is not an integer ID.
        """
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            logger.info("%s not found, starting with empty data.", self.path.name)
            return {}
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading markers file %s: %s", self.path, str(e))
            raise StoreReadError(context={"path": str(self.path), "os_error": str(e)})

        try:
            payload = json.loads(raw)
        except ValueError as e:
            logger.error("Markers file %s is not valid JSON: %s", self.path, str(e))
            raise StoreReadError(context={"path": str(self.path), "parse_error": str(e)})

        if not isinstance(payload, dict):
            logger.error("Markers file %s does not hold a JSON object", self.path)
            raise StoreReadError(
                context={"path": str(self.path), "found_type": type(payload).__name__}
            )

        markers: Markers = {}
        for key, record in payload.items():
            try:
                marker_id = int(key)
            except ValueError:
                logger.error("Markers file %s has a non-integer key %r", self.path, key)
                raise StoreReadError(context={"path": str(self.path), "bad_key": key})
            markers[marker_id] = record
        return markers

    async def save(self, markers: Markers) -> None:
        """
        Overwrite the file with the full marker mapping.

        How:     Serialize (indent=2, strict JSON so inf/NaN are refused), write `<name>.<uuid>.tmp` next to the
                 target, then os.replace() it into place.

        Raises:
            StoreWriteError: Serialization or any file system failure. The
                temporary file is removed if it was created.
        """
        try:
            content = json.dumps(
                {str(marker_id): record for marker_id, record in markers.items()},
                indent=2,
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            logger.error("Could not serialize markers: %s", str(e))
            raise StoreWriteError(context={"path": str(self.path), "error": str(e)})

        tmp_path = self.path.with_name(f"{self.path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(content)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Error writing markers file %s: %s", self.path, str(e))
            self._discard(tmp_path)
            raise StoreWriteError(context={"path": str(self.path), "os_error": str(e)})

        logger.debug("Saved %d markers to %s", len(markers), self.path)

    def _discard(self, tmp_path: Path) -> None:
        """Best-effort removal of an abandoned temp file."""
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to clean up temp file %s: %s", tmp_path, str(e))
