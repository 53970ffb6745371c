"""
Garden Map — Marker API Client
================================

What:  Async HTTP client for the four /api/markers endpoints.
How:   httpx.AsyncClient with JSON bodies. Any non-2xx response or transport
       failure becomes a MarkerApiError carrying the message to show the user.
Who:   Used by MapController; also usable from scripts.

Example:
    async with MarkerApiClient("http://localhost:3000/api") as api:
        marker = await api.create_marker({"lat": 10, "lng": 20}, {"name": "Rose"})
        await api.update_marker(marker["id"], data={"logbook": "watered"})
"""

import logging
from typing import Any, Dict, Optional

import httpx

from gardenmap.config import settings

logger = logging.getLogger(__name__)

COMMUNICATION_FAILURE = (
    "Failed to communicate with the server. Please check the connection and try again."
)


class MarkerApiError(Exception):
    """
    A marker API call did not succeed.

    Attributes:
        status_code: HTTP status, or None when no response was received
        message:     Server-provided `message`, or a fallback description
    """

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"API request failed ({status_code}): {message}")


class MarkerApiClient:
    """Thin wrapper over httpx that speaks the marker API's JSON shapes."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        """
        Args:
            base_url: API root, e.g. "http://localhost:3000/api".
                      Defaults to settings.api_base_url.
            client:   Pre-configured httpx client (tests pass one bound to
                      ASGITransport). Its base_url must already point at the
                      API root; it is not closed by aclose().
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout,
        )

    async def __aenter__(self) -> "MarkerApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._client.request(method, path, json=body)
        except httpx.HTTPError as e:
            logger.error("Network error on %s %s: %s", method, path, str(e))
            raise MarkerApiError(None, COMMUNICATION_FAILURE) from e

        if not response.is_success:
            try:
                message = response.json().get("message") or response.reason_phrase
            except (ValueError, AttributeError):
                message = response.reason_phrase
            logger.error("API error (%d) on %s %s: %s", response.status_code, method, path, message)
            raise MarkerApiError(response.status_code, message)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MarkerApiError(response.status_code, "Server returned an invalid response.") from e

    async def list_markers(self) -> Dict[int, Dict[str, Any]]:
        """All markers keyed by integer ID."""
        payload = await self._request("GET", "/markers")
        return {int(marker_id): record for marker_id, record in (payload or {}).items()}

    async def create_marker(self, latlng: Dict[str, float], data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/markers", {"latlng": latlng, "data": data})

    async def update_marker(
        self,
        marker_id: int,
        latlng: Optional[Dict[str, float]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send only the parts being changed."""
        body: Dict[str, Any] = {}
        if latlng is not None:
            body["latlng"] = latlng
        if data is not None:
            body["data"] = data
        return await self._request("PUT", f"/markers/{marker_id}", body)

    async def delete_marker(self, marker_id: int) -> Optional[Dict[str, Any]]:
        return await self._request("DELETE", f"/markers/{marker_id}")
