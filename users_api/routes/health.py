"""
Users API: Health Check Route
==============================

What:  Health check endpoint for monitoring and load balancer health checks.
How:   Runs SELECT 1 against the database and reports the aggregate status
       inside the standard envelope.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Request
from sqlalchemy import text

from users_api import __version__
from users_api.database import engine
from users_api.results import Result, SoftFailure, Success
from users_api.routing import EnvelopeRoute
from users_api.schemas.envelope import FailureEnvelope, HealthResponse, SuccessEnvelope

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"], route_class=EnvelopeRoute)

_start_time = time.time()


@router.get(
    "/health",
    responses={200: {"model": SuccessEnvelope}, 503: {"model": FailureEnvelope}},
    summary="Service health check",
)
async def health_check(request: Request) -> Result:
    """
    Ping the database and report service health.

    The `data` of a healthy response is a HealthResponse. An unreachable
    database yields a 503 failure envelope so load balancers stop routing.
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return SoftFailure(status_code=503, message="Service unhealthy: database disconnected")

    policy = request.app.state.normalizer.classifier.policy
    return Success(
        data=HealthResponse(
            status="healthy",
            version=__version__,
            database="connected",
            disclosure_policy=policy.value,
            uptime_seconds=round(time.time() - _start_time, 2),
        ),
        message="Service healthy",
    )
