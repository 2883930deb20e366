"""
Users API: Unhandled Error Middleware
======================================

What:  Renders any exception no handler claimed as a 500 failure envelope.
How:   Innermost middleware: it sits inside RequestID, Logging and CORS, so the
       500 response still gets the X-Request-ID header, an access-log line and
       CORS headers. Structured faults (UsersApiError, HTTPException,
       RequestValidationError) never get here; ExceptionMiddleware answers
       them first.
Who:   Registered first in create_app() (first added runs last).

The request's yield dependencies have already exited when the error reaches
this point, so the database session was rolled back.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from users_api.middleware.request_id import request_id_var
from users_api.routing import request_path

logger = logging.getLogger(__name__)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turns an escaped exception into the normalizer's failure envelope."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            rid = request_id_var.get("")
            logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
            rendered = request.app.state.normalizer.from_error(
                exc, method=request.method, path=request_path(request)
            )
            return rendered.to_response()
