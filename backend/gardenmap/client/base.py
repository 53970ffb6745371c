"""
Garden Map — Map Client Collaborator Interfaces
=================================================

What:  Abstract interfaces for the pieces of the UI the controller does not
       own: the map widget that draws pins, and the dialogs that talk to the
       user.
How:   A UI toolkit binding subclasses MapView and UserPrompt; tests use
       in-memory fakes.
Who:   Passed to MapController at construction.

The map widget (image overlay, simple CRS, zoom, drag mechanics) is an
external library. The controller only needs the four pin operations below.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

LatLngDict = Dict[str, float]


@dataclass
class PinHandlers:
    """
    Callbacks bound to a single pin when it is rendered.

    Each callback already knows its pin's marker ID, so the widget only
    forwards the event.
    """
    on_drag_end: Callable[[LatLngDict], Awaitable[Any]]
    on_edit: Callable[[], Any]
    on_delete: Callable[[], Awaitable[Any]]


class MapView(ABC):
    """
    Contract for the map widget.

    Layers are opaque handles returned by add_pin() and handed back to the
    other methods.
    """

    @abstractmethod
    def add_pin(
        self,
        marker_id: int,
        latlng: LatLngDict,
        popup_html: str,
        handlers: PinHandlers,
    ) -> Any:
        """Draw a draggable pin, bind its popup and handlers, return the layer."""
        ...

    @abstractmethod
    def move_pin(self, layer: Any, latlng: LatLngDict) -> None:
        ...

    @abstractmethod
    def set_popup(self, layer: Any, popup_html: str) -> None:
        ...

    @abstractmethod
    def remove_pin(self, layer: Any) -> None:
        ...


class UserPrompt(ABC):
    """Blocking dialogs shown to the user."""

    @abstractmethod
    def alert(self, message: str) -> None:
        ...

    @abstractmethod
    def confirm(self, message: str) -> bool:
        """Return True when the user accepts."""
        ...


def is_latlng(value: Optional[Any]) -> bool:
    """True for a mapping with numeric `lat` and `lng`."""
    if not isinstance(value, dict):
        return False
    return all(
        isinstance(value.get(axis), (int, float)) and not isinstance(value.get(axis), bool)
        for axis in ("lat", "lng")
    )
