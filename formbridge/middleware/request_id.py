"""
FormBridge - Request ID Middleware
===================================

What:  Tags every request with a short correlation ID and returns it in X-Request-ID.
How:   Reuses a client-supplied X-Request-ID, otherwise generates one; stores
       it in a ContextVar so exception handlers and services can log it.

A submission touches GitHub up to four times. The ID ties the access-log
line, the content store log lines and any error body together.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on the same event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID and echoes it in the X-Request-ID response header."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "").strip()[:MAX_CLIENT_ID_LENGTH]
        if not rid:
            rid = uuid.uuid4().hex[:8]

        # Left set after the call: the catch-all 500 handler runs outside this middleware
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
