"""
Users API: FastAPI Application Factory
=======================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn users_api.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────┐ ┌──────────┐  │
    │  │  Rate Limit  │→│  Req ID  │→│ Logging │→│   CORS   │→ │
    │  └──────────────┘ └──────────┘ └─────────┘ └──────────┘  │
    │  ┌──────────────────────────────────────┐                │
    │  │ Unhandled Error (500 envelope)       │                │
    │  └──────────────────────────────────────┘                │
    │                                                          │
    │  Routes (EnvelopeRoute → OutcomeNormalizer.from_result): │
    │  ┌──────────────┐ ┌──────────────────┐ ┌─────────────┐   │
    │  │   /users/*   │ │ /memory/users/*  │ │ GET /health │   │
    │  └──────────────┘ └──────────────────┘ └─────────────┘   │
    │                                                          │
    │  Exception Handlers (OutcomeNormalizer.from_error):      │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ UsersApiError │ RequestValidation │ HTTP │ Exception│  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Every response body, success or failure, is the same envelope:
    {status, statusCode, path, method, timestamp, message[, data]}

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (log problems, keep serving)
    3. Create tables when running on SQLite (tests, local runs)

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from users_api import __version__
from users_api.config import DisclosurePolicy, settings
from users_api.database import create_tables, dispose_engine
from users_api.envelope import OutcomeNormalizer
from users_api.exceptions import UsersApiError
from users_api.faults import FaultClassifier
from users_api.middleware.errors import UnhandledErrorMiddleware
from users_api.middleware.logging import RequestLoggingMiddleware
from users_api.middleware.rate_limit import RateLimitMiddleware
from users_api.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    request_id_var,
)
from users_api.routes import health, memory_users, users
from users_api.routing import request_path

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] users_api.access: GET /users/... 200 3.1ms

    Third-party loggers that log every operation at INFO are raised to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging, config validation, SQLite schema. Shutdown: dispose engine."""
    setup_logging()
    logger.info("=" * 60)
    logger.info("Users API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    if settings.database_url.startswith("sqlite"):
        # No migrations on SQLite; build the schema from the models
        await create_tables()
        logger.info("SQLite schema created")

    logger.info(
        "Error disclosure policy: %s",
        app.state.normalizer.classifier.policy.value,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Users API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _render_error(request: Request, exc: Exception) -> JSONResponse:
    rid = request_id_var.get("")
    rendered = request.app.state.normalizer.from_error(
        exc, method=request.method, path=request_path(request)
    )
    headers = {REQUEST_ID_HEADER: rid} if rid else None
    return rendered.to_response(headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers.

    Every handler renders through the OutcomeNormalizer, so status code,
    message and disclosure policy come from one place (the FaultClassifier).
    The handlers only differ in how they log.

    Handler hierarchy:
        UsersApiError           → its own status (400/404/409/429/500), WARNING
                                  for client faults, ERROR for server faults
        RequestValidationError  → 400 with {field: [messages...]}
        HTTPException           → its own status (unknown route 404, 405, ...)
        Exception (fallback)    → 500 for errors raised by middleware itself;
                                  route errors are rendered by UnhandledErrorMiddleware

    Context attached to UsersApiError (SQL text, ids) is logged, never returned.
    """

    @app.exception_handler(UsersApiError)
    async def handle_users_api_error(request: Request, exc: UsersApiError):
        rid = request_id_var.get("")
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            "[%s] %s: %s | Context: %s",
            rid,
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return _render_error(request, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation failed: %d error(s)", rid, len(exc.errors()))
        return _render_error(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        rid = request_id_var.get("")
        logger.info("[%s] HTTP %d: %s", rid, exc.status_code, exc.detail)
        return _render_error(request, exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _render_error(request, exc)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    disclosure_policy: Optional[DisclosurePolicy] = None,
    rate_limit_requests: Optional[int] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        disclosure_policy:   Overrides settings.disclosure_policy
        rate_limit_requests: Overrides settings.rate_limit_requests

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Users API",
        description=(
            "User management API. Every response, success or failure, uses the "
            "same envelope: status, statusCode, path, method, timestamp, message "
            "and (for successes with a payload) data."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    policy = disclosure_policy if disclosure_policy is not None else settings.disclosure_policy
    app.state.normalizer = OutcomeNormalizer(FaultClassifier(policy))

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → CORS → UnhandledError
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware, max_requests=rate_limit_requests)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(users.router)
    app.include_router(memory_users.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
