"""
Users API: Request ID Middleware
=================================

What:  Assigns a correlation id to each request and echoes it back in the
       X-Request-ID response header.
How:   Uses the client's X-Request-ID when sent, otherwise a short UUID.
       The id is stored in a ContextVar (for loggers and exception handlers)
       and on request.state (for route handlers).
Who:   Applied to every request via Starlette middleware.

Failure envelopes produced by the global exception handlers carry the same
header, so a client can quote the id from any response.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request id to the context, the request state and the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 hex chars are enough to correlate log lines
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
