"""Health check API routes."""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import SQLAlchemyError

from tokenauth.config import Settings, get_settings
from tokenauth.infrastructure.cache.redis_client import get_redis_client
from tokenauth.infrastructure.database.session import ping_database
from .schemas import HealthResponse, LivenessResponse, ReadinessResponse

logger = logging.getLogger("tokenauth.api")

router = APIRouter(prefix="/health", tags=["Health Check"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get(
    "",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Simple health check endpoint.",
)
async def basic_health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns minimal health status information without dependency checks.
    """
    return HealthResponse(status="healthy", timestamp=_timestamp())


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Check if the application is ready to serve requests.",
    responses={
        200: {"description": "Service is ready"},
        503: {"description": "Service is not ready"},
    },
)
async def readiness_check(
    response: Response,
    settings: Settings = Depends(get_settings),
) -> ReadinessResponse:
    """
    Readiness probe.

    The database is required. Redis only backs the rate limiter, which
    falls back to in-process counters, so an unreachable Redis is reported
    as degraded without failing the probe.
    """
    checks = {}
    ready = True

    start_time = time.perf_counter()
    try:
        await ping_database()
        latency = (time.perf_counter() - start_time) * 1000
        checks["database"] = {"status": "ready", "latency_ms": round(latency, 2)}
    except (SQLAlchemyError, OSError) as e:
        logger.error("Database readiness check failed: %s", e)
        checks["database"] = {"status": "not_ready", "error": e.__class__.__name__}
        ready = False

    if settings.rate_limit_enabled:
        redis_ok = await get_redis_client().ping()
        checks["redis"] = {"status": "ready" if redis_ok else "degraded"}
    else:
        checks["redis"] = {"status": "not_configured"}

    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(ready=ready, checks=checks)


@router.get(
    "/live",
    response_model=LivenessResponse,
    summary="Liveness check",
    description="Check if the application is alive and responsive.",
)
async def liveness_check() -> LivenessResponse:
    """Liveness probe; does not check dependencies."""
    return LivenessResponse(alive=True, timestamp=_timestamp())
