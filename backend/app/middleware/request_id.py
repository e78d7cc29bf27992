"""
Backoffice API: Request ID Middleware
======================================

What:  Assigns a short correlation ID to each request and returns it in the
       X-Request-ID response header.
How:   A client-supplied X-Request-ID is reused when it is a plain token
       (letters, digits, dot, dash, underscore; at most 64 characters).
       Otherwise an 8-character hex ID is generated. The ID lives in a
       ContextVar for the duration of the request, where the access log and
       the error handlers read it.
When:  Outermost application middleware (runs before request logging).
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# The ID is echoed into log lines and response headers
_CLIENT_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_request_id(incoming: Optional[str]) -> str:
    """Return the client's ID when usable, else a fresh one."""
    if incoming and _CLIENT_ID.fullmatch(incoming):
        return incoming
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags every request and response with an X-Request-ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
