"""
Users API: Request Logging Middleware
======================================

What:  One access-log line per HTTP request.
How:   Measures time around call_next and logs method, path, status,
       duration, request id and client IP on the "users_api.access" logger.
Who:   Applied to every request via Starlette middleware, inside
       RequestIDMiddleware so the id is already set.

Log levels follow the response status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Request bodies are never logged (they carry passwords).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from users_api.middleware.request_id import request_id_var

logger = logging.getLogger("users_api.access")


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one structured line per request. /health is skipped."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code

        logger.log(
            _level_for(status),
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
