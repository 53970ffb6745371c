"""
Garden Map Backend — Request ID Middleware
============================================

What:  Tags each request with a short ID that shows up in the response
       header, in error bodies, and in every log line for that request.
How:   Reuses the map client's X-Request-ID when it is a plain token,
       otherwise mints an 8-character one; kept in a ContextVar.
Who:   Applied to every request via Starlette middleware.

The header value is echoed into JSON error bodies and log lines, so only
short tokens of letters, digits, '.', '_' and '-' are trusted.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def accepted_request_id(header_value: str) -> str:
    """The client's ID if it is a plain token, else a fresh one."""
    if header_value and _CLIENT_ID_PATTERN.fullmatch(header_value):
        return header_value
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accepted_request_id(request.headers.get(REQUEST_ID_HEADER, ""))

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
