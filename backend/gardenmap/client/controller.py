"""
Garden Map — Map Controller
=============================

What:  Reacts to map events (load, click, drag, edit, delete, form submit),
       calls the marker API, and keeps the local cache and pins in step.
How:   The controller owns an explicit MarkerCache. Handlers return it after
       each action so the UI layer can re-read state without globals.
Who:   Built by the UI binding with a MarkerApiClient, a MapView and a
       UserPrompt.

Consistency rules:
    - The cache changes only after the server acknowledges a mutation.
    - Every failed API call shows one alert and leaves the cache untouched.
    - A failed drag moves the pin back to its last acknowledged position,
      so what the map shows always matches the cache.
    - Each pin's handlers are closures over that pin's ID, created when the
      pin is rendered.
"""

import html
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterator, Optional

from gardenmap.client.api_client import MarkerApiClient, MarkerApiError
from gardenmap.client.base import LatLngDict, MapView, PinHandlers, UserPrompt, is_latlng

logger = logging.getLogger(__name__)

LOAD_FAILURE = (
    "Could not load markers from the server. "
    "Please ensure the server is running and try refreshing."
)


@dataclass
class CachedMarker:
    latlng: LatLngDict
    data: Dict[str, Any]
    layer: Any = None


class MarkerCache:
    """Ephemeral mirror of the server's markers, keyed by integer ID."""

    def __init__(self, entries: Optional[Dict[int, CachedMarker]] = None):
        self.entries: Dict[int, CachedMarker] = dict(entries or {})

    def __contains__(self, marker_id: object) -> bool:
        return marker_id in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self.entries)

    def get(self, marker_id: int) -> Optional[CachedMarker]:
        return self.entries.get(marker_id)

    def put(self, marker_id: int, entry: CachedMarker) -> None:
        self.entries[marker_id] = entry

    def remove(self, marker_id: int) -> Optional[CachedMarker]:
        return self.entries.pop(marker_id, None)


# (form attribute, wire name)
FORM_FIELDS = (
    ("name", "name"),
    ("planted_date", "plantedDate"),
    ("logbook", "logbook"),
    ("info_link", "infoLink"),
    ("picture_repo", "pictureRepo"),
)


@dataclass
class MarkerForm:
    """
    Contents of the add/edit dialog.

    A form with `marker_id` edits that marker; a form with only `latlng`
    creates one there.
    """
    title: str
    marker_id: Optional[int] = None
    latlng: Optional[LatLngDict] = None
    name: str = ""
    planted_date: str = ""
    logbook: str = ""
    info_link: str = ""
    picture_repo: str = ""

    def to_data(self) -> Dict[str, str]:
        return {wire: getattr(self, attr) for attr, wire in FORM_FIELDS}

    @classmethod
    def for_marker(cls, marker_id: int, data: Dict[str, Any]) -> "MarkerForm":
        values = {attr: data.get(wire) or "" for attr, wire in FORM_FIELDS}
        return cls(title="Edit Plant Marker", marker_id=marker_id, **values)


def popup_content(marker_id: int, data: Dict[str, Any]) -> str:
    """
    HTML for a pin's popup. All user text is escaped.

    The Edit/Delete buttons carry `data-action` attributes; the MapView wires
    them to the pin's PinHandlers.
    """
    def text(key: str) -> str:
        return html.escape(str(data.get(key) or ""))

    name = text("name") or "Unnamed Plant"
    planted = text("plantedDate") or "Unknown"
    logbook = text("logbook") or "<i>No log entries yet.</i>"
    link = text("infoLink")
    info = f'<a href="{link}" target="_blank">Link</a>' if link else "<i>No link</i>"
    pictures = text("pictureRepo") or "<i>No picture repository</i>"
    return (
        f'<div class="marker-popup" data-marker-id="{marker_id}">'
        f"<h3>{name}</h3>"
        f"<p>Planted: {planted}</p>"
        f"<p>Log: {logbook}</p>"
        f"<p>Info: {info}</p>"
        f"<p>Pics: {pictures}</p>"
        "<hr>"
        '<button type="button" data-action="edit">Edit</button>'
        '<button type="button" data-action="delete">Delete</button>'
        "</div>"
    )


class MapController:
    """Keeps the map, the local cache, and the server in agreement."""

    def __init__(
        self,
        api: MarkerApiClient,
        map_view: MapView,
        prompt: UserPrompt,
        state: Optional[MarkerCache] = None,
    ):
        self.api = api
        self.map_view = map_view
        self.prompt = prompt
        self.state = state if state is not None else MarkerCache()

    # ── Rendering ─────────────────────────────────────────────────────────

    def _render(self, marker_id: int, latlng: LatLngDict, data: Dict[str, Any]) -> CachedMarker:
        handlers = PinHandlers(
            on_drag_end=lambda new_latlng: self.on_drag_end(marker_id, new_latlng),
            on_edit=lambda: self.on_edit(marker_id),
            on_delete=lambda: self.on_delete(marker_id),
        )
        layer = self.map_view.add_pin(marker_id, latlng, popup_content(marker_id, data), handlers)
        entry = CachedMarker(latlng=latlng, data=data, layer=layer)
        self.state.put(marker_id, entry)
        logger.debug("Marker %d rendered at %s", marker_id, latlng)
        return entry

    def _fail(self, error: MarkerApiError) -> None:
        self.prompt.alert(f"Error: {error.message}")

    # ── Event Handlers ────────────────────────────────────────────────────

    async def load_markers(self) -> MarkerCache:
        """Replace every pin and the whole cache with the server's list."""
        try:
            markers = await self.api.list_markers()
        except MarkerApiError as e:
            logger.error("Failed to load initial markers: %s", e.message)
            self.prompt.alert(LOAD_FAILURE)
            return self.state

        for marker_id in list(self.state):
            entry = self.state.remove(marker_id)
            if entry is not None and entry.layer is not None:
                self.map_view.remove_pin(entry.layer)

        for marker_id, record in sorted(markers.items()):
            self._render(marker_id, record["latlng"], record["data"])
        logger.info("Loaded %d markers.", len(self.state))
        return self.state

    def on_map_click(self, latlng: LatLngDict) -> MarkerForm:
        """Empty-map click: a create form at the clicked point, dated today."""
        return MarkerForm(
            title="Add New Plant Marker",
            latlng=latlng,
            planted_date=date.today().isoformat(),
        )

    def on_edit(self, marker_id: int) -> Optional[MarkerForm]:
        entry = self.state.get(marker_id)
        if entry is None:
            logger.error("Cannot edit marker, ID not found: %s", marker_id)
            self.prompt.alert("Error: Could not find marker data to edit.")
            return None
        return MarkerForm.for_marker(marker_id, entry.data)

    async def on_drag_end(self, marker_id: int, latlng: LatLngDict) -> MarkerCache:
        """Persist a pin's new position; put the pin back if the server refuses."""
        entry = self.state.get(marker_id)
        if entry is None:
            logger.warning("Drag ended for unknown marker %s", marker_id)
            return self.state

        try:
            updated = await self.api.update_marker(marker_id, latlng=latlng)
        except MarkerApiError as e:
            logger.error("Failed to update marker %d position: %s", marker_id, e.message)
            self._fail(e)
            self.map_view.move_pin(entry.layer, entry.latlng)
            return self.state

        entry.latlng = updated["latlng"]
        logger.info("Marker %d position updated.", marker_id)
        return self.state

    async def submit_form(self, form: MarkerForm) -> bool:
        """
        Save the dialog. Returns True when the dialog may close.

        Edits send only `data` (position changes go through dragging).
        """
        try:
            if form.marker_id is not None and form.marker_id in self.state:
                updated = await self.api.update_marker(form.marker_id, data=form.to_data())
                entry = self.state.get(form.marker_id)
                entry.data = updated["data"]
                self.map_view.set_popup(entry.layer, popup_content(form.marker_id, entry.data))
                logger.info("Marker %d data updated.", form.marker_id)
                return True

            if form.latlng is not None:
                if not is_latlng(form.latlng):
                    logger.error("Invalid latlng on create form: %r", form.latlng)
                    self.prompt.alert("Error: Invalid location data for new marker.")
                    return False
                created = await self.api.create_marker(form.latlng, form.to_data())
                self._render(created["id"], created["latlng"], created["data"])
                logger.info("New marker created with ID %d.", created["id"])
                return True
        except MarkerApiError as e:
            logger.error("Error saving marker: %s", e.message)
            self._fail(e)
            return False

        logger.error("Form submitted without ID or LatLng.")
        self.prompt.alert("Error: Cannot save marker without location or ID.")
        return False

    async def on_delete(self, marker_id: int) -> MarkerCache:
        """Ask, delete on the server, then drop the pin and cache entry."""
        if not self.prompt.confirm(f"Are you sure you want to delete marker {marker_id}?"):
            return self.state

        try:
            await self.api.delete_marker(marker_id)
        except MarkerApiError as e:
            logger.error("Failed to delete marker %d: %s", marker_id, e.message)
            self._fail(e)
            return self.state

        entry = self.state.remove(marker_id)
        if entry is None:
            logger.warning("Marker %d was not cached, but the server deleted it.", marker_id)
        elif entry.layer is not None:
            self.map_view.remove_pin(entry.layer)
        logger.info("Marker %d deleted.", marker_id)
        return self.state
