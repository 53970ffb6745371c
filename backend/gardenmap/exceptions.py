"""
Garden Map Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the marker API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return JSON error responses with the matching HTTP status code.
Who:   Raised by MarkerStore and MarkerService; caught by global handlers.

Exception Hierarchy:
    GardenMapError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    └── StoreError               → 500 Internal Server Error
        ├── StoreReadError       (file unreadable or malformed)
        └── StoreWriteError      (file could not be written)

Every error response carries a `message`. Store messages are returned to the
client as-is; `context` (paths, OS errors) stays in the server log.
"""

from typing import Any, Dict, Optional


class GardenMapError(Exception):
    """
    Base exception for all Garden Map application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GardenMapError):
    """
    Raised when a request body is malformed or incomplete.

    When:    Create without latlng/data/data.name, update with neither field.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Missing required marker data (latlng, data.name).",
            "details": {"field": "data.name"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(GardenMapError):
    """
    Raised when a referenced marker ID is not in the store.

    When:    PUT or DELETE /api/markers/{id} for an ID that was never
             assigned or has been deleted.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "Marker",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource.lower()} was not found."
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found."
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class StoreError(GardenMapError):
    """
    Raised when the marker file cannot be read or written.

    HTTP:    500 Internal Server Error
    The message is surfaced to the caller verbatim; the OS error and the
    file path travel in `context` for the server log.
    """

    def __init__(
        self,
        message: str = "Marker storage operation failed.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreReadError(StoreError):
    """File exists but could not be read or does not hold a marker mapping."""

    def __init__(
        self,
        message: str = "Could not read marker data.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreWriteError(StoreError):
    """Serializing or writing the marker file failed."""

    def __init__(
        self,
        message: str = "Could not save marker data.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
