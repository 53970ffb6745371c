# Client package init
"""
Garden Map — Map Client
=========================

What:  The map-side controller: keeps a local cache of markers in sync with
       the /api/markers endpoints and drives an injected map widget.

Module Inventory:
    - base.py:        MapView and UserPrompt interfaces the UI toolkit implements
    - api_client.py:  MarkerApiClient (httpx) and MarkerApiError
    - controller.py:  MapController, MarkerCache, MarkerForm, popup_content()
"""

from gardenmap.client.api_client import MarkerApiClient, MarkerApiError
from gardenmap.client.base import MapView, PinHandlers, UserPrompt
from gardenmap.client.controller import (
    CachedMarker,
    MapController,
    MarkerCache,
    MarkerForm,
    popup_content,
)

__all__ = [
    "CachedMarker",
    "MapController",
    "MapView",
    "MarkerApiClient",
    "MarkerApiError",
    "MarkerCache",
    "MarkerForm",
    "PinHandlers",
    "UserPrompt",
    "popup_content",
]
