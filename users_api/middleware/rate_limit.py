"""
Users API: Rate Limiting Middleware
====================================

What:  Per-IP sliding window rate limiter to prevent abuse.
How:   Tracks request timestamps per IP in memory; over-budget requests get
       a 429 failure envelope rendered by the app's OutcomeNormalizer.
Who:   Applied to every request via Starlette middleware.
When:  First in the middleware chain (rejects abuse before any processing).

Algorithm: Sliding Window Counter
    1. Each IP gets a list of request timestamps
    2. On each request, remove timestamps older than the window
    3. If remaining count >= limit, reject with 429
    4. Otherwise, add current timestamp and allow through

This in-memory implementation is only correct for a single process.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from users_api.config import settings
from users_api.exceptions import RateLimitExceededError
from users_api.routing import request_path

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Configuration (from settings unless passed explicitly):
        max_requests: Max requests per window (default: rate_limit_requests)
        window:       Window duration in seconds (default: rate_limit_window)

    Excluded paths:
        - /health: Health checks should never be rate-limited
        - /docs, /openapi.json, /redoc: API documentation
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window: Optional[int] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests if max_requests is not None else settings.rate_limit_requests
        self.window = window if window is not None else settings.rate_limit_window
        self._requests: Dict[str, List[float]] = defaultdict(list)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        # Behind a proxy this is the proxy's address
        client_ip = request.client.host if request.client else "unknown"

        now = time.time()
        window_start = now - self.window

        self._requests[client_ip] = [
            ts for ts in self._requests[client_ip] if ts > window_start
        ]

        if len(self._requests[client_ip]) >= self.max_requests:
            oldest = self._requests[client_ip][0]
            retry_after = int(oldest + self.window - now) + 1

            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(self._requests[client_ip]),
                self.window,
            )

            error = RateLimitExceededError(retry_after, context={"client_ip": client_ip})
            rendered = request.app.state.normalizer.from_error(
                error, method=request.method, path=request_path(request)
            )
            return rendered.to_response(headers={"Retry-After": str(retry_after)})

        self._requests[client_ip].append(now)

        # Every 1000th tracked request, drop IPs with nothing in the window
        if sum(len(v) for v in self._requests.values()) % 1000 == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
