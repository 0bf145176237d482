"""Health check endpoints."""

import time
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from redis.asyncio import Redis
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy import __version__
from tenancy.api.dependencies import get_db, get_redis
from tenancy.api.schemas.health import (
    ComponentHealth,
    HealthDetailResponse,
    HealthResponse,
    HealthStatus,
)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Returns basic liveness status. No authentication required.",
)
async def health_check() -> HealthResponse:
    """Liveness check; 200 whenever the process is serving requests."""
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        version=__version__,
        timestamp=datetime.now(UTC),
    )


@router.get(
    "/health/db",
    response_model=HealthDetailResponse,
    summary="Database health check",
)
async def health_db(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthDetailResponse:
    db_health = await _check_database(db)
    return HealthDetailResponse(
        status=db_health.status,
        version=__version__,
        timestamp=datetime.now(UTC),
        database=db_health,
        checks_performed=["database"],
    )


@router.get(
    "/health/ready",
    response_model=HealthDetailResponse,
    summary="Full readiness check",
)
async def health_ready(
    db: Annotated[AsyncSession, Depends(get_db)],
    redis: Annotated[Redis, Depends(get_redis)],
) -> HealthDetailResponse:
    """Readiness check over the database and Redis.

    Redis only holds cache entries, so an unreachable Redis degrades the
    service instead of failing it.
    """
    db_health = await _check_database(db)
    redis_health = await _check_redis(redis)
    return HealthDetailResponse(
        status=_aggregate_health([db_health, redis_health]),
        version=__version__,
        timestamp=datetime.now(UTC),
        database=db_health,
        redis=redis_health,
        checks_performed=["database", "redis"],
    )


async def _check_database(db: AsyncSession) -> ComponentHealth:
    start = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"Database connection failed: {str(e)[:100]}",
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Database connection successful",
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
    )


async def _check_redis(redis: Redis) -> ComponentHealth:
    start = time.perf_counter()
    try:
        await redis.ping()
    except Exception as e:
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message=f"Redis ping failed: {str(e)[:100]}",
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Redis connection successful",
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
    )


def _aggregate_health(components: list[ComponentHealth | None]) -> HealthStatus:
    """UNHEALTHY if any component is, else DEGRADED if any is, else HEALTHY."""
    statuses = [c.status for c in components if c is not None]
    if any(s == HealthStatus.UNHEALTHY for s in statuses):
        return HealthStatus.UNHEALTHY
    if any(s == HealthStatus.DEGRADED for s in statuses):
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY
