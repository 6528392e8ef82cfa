"""Health check and metrics endpoints."""

import time
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from backoffice import __version__
from backoffice.api.dependencies import AppContextDep
from backoffice.api.models.health import ComponentHealth, HealthResponse
from backoffice.context import AppContext
from backoffice.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


async def _check_postgres(context: AppContext) -> ComponentHealth:
    start = time.perf_counter()
    healthy = await context.pool.health_check()
    latency_ms = (time.perf_counter() - start) * 1000
    if healthy:
        return ComponentHealth(name="postgres", status="healthy", latency_ms=latency_ms)
    return ComponentHealth(
        name="postgres",
        status="unhealthy",
        latency_ms=latency_ms,
        message="Database did not answer",
    )


async def _check_redis(context: AppContext) -> ComponentHealth:
    start = time.perf_counter()
    try:
        await context.redis_client.ping()
    except Exception as e:
        return ComponentHealth(
            name="settings_cache",
            status="degraded",
            latency_ms=(time.perf_counter() - start) * 1000,
            message=str(e),
        )
    return ComponentHealth(
        name="settings_cache",
        status="healthy",
        latency_ms=(time.perf_counter() - start) * 1000,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(context: AppContextDep) -> HealthResponse:
    """Overall service status plus the status of each backing component.

    A failing cache only degrades the service; a failing database makes it
    unhealthy.
    """
    components: list[ComponentHealth] = []
    if context.pool is not None:
        components.append(await _check_postgres(context))
    else:
        components.append(ComponentHealth(name="storage", status="healthy", message="in-memory"))
    if context.redis_client is not None:
        components.append(await _check_redis(context))

    overall: Literal["healthy", "degraded", "unhealthy"] = "healthy"
    if any(c.status == "unhealthy" for c in components):
        overall = "unhealthy"
    elif any(c.status == "degraded" for c in components):
        overall = "degraded"

    logger.debug("health_check_completed", status=overall)
    return HealthResponse(
        status=overall,
        version=__version__,
        components=components,
        timestamp=datetime.now(UTC),
    )


@router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
