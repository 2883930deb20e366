"""
Users API: Envelope Route Class
================================

What:  An APIRoute subclass that sends every endpoint's return value through
       the OutcomeNormalizer.
How:   1. The endpoint is wrapped; the wrapper awaits it and renders the
          result with the normalizer stored on `app.state.normalizer`.
       2. get_route_handler() publishes the in-flight Request in a ContextVar
          so the wrapper knows the method and URL.
       3. Raised errors are NOT caught here. They propagate to the global
          exception handlers (main.py), which render the failure envelope,
          so a request never gets two bodies.
Who:   Used by every APIRouter in users_api.routes via `route_class=EnvelopeRoute`.

Usage:
    router = APIRouter(prefix="/users", route_class=EnvelopeRoute)

    @router.get("/{user_id}")
    async def get_user(user_id: UUID) -> ...:
        return await service.get(user_id)        # Success / SoftFailure / plain value

Endpoints must be `async def`.
"""

import functools
from contextvars import ContextVar
from typing import Any, Callable, Coroutine, Optional

from fastapi import Request
from fastapi.datastructures import DefaultPlaceholder
from fastapi.routing import APIRoute
from starlette.responses import Response

from users_api.envelope import OutcomeNormalizer

current_request: ContextVar[Optional[Request]] = ContextVar("current_request", default=None)


def request_path(request: Request) -> str:
    """Path plus query string, as the client sent it."""
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return path


def get_normalizer(request: Request) -> OutcomeNormalizer:
    return request.app.state.normalizer


def _enveloped(endpoint: Callable[..., Coroutine[Any, Any, Any]], default_status: int):
    # include_router() rebuilds routes from route.endpoint, which is already wrapped
    if getattr(endpoint, "__enveloped__", False):
        return endpoint

    @functools.wraps(endpoint)
    async def wrapper(*args: Any, **kwargs: Any) -> Response:
        result = await endpoint(*args, **kwargs)
        if isinstance(result, Response):
            return result
        request = current_request.get()
        rendered = get_normalizer(request).from_result(
            result,
            method=request.method,
            path=request_path(request),
            default_status=default_status,
        )
        return rendered.to_response()

    wrapper.__enveloped__ = True
    return wrapper


class EnvelopeRoute(APIRoute):
    """Route whose successful results are rendered as envelopes."""

    def __init__(self, path: str, endpoint: Callable[..., Any], **kwargs: Any):
        # Return annotations describe the handler result, not the response body
        if isinstance(kwargs.get("response_model"), DefaultPlaceholder):
            kwargs["response_model"] = None
        status_code = kwargs.get("status_code")
        if isinstance(status_code, DefaultPlaceholder) or status_code is None:
            status_code = 200
        super().__init__(path, _enveloped(endpoint, status_code), **kwargs)

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()

        async def envelope_route_handler(request: Request) -> Response:
            token = current_request.set(request)
            try:
                return await handler(request)
            finally:
                current_request.reset(token)

        return envelope_route_handler
