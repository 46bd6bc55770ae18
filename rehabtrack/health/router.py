"""Health check endpoints.

``/health/live`` never touches dependencies. ``/health/ready`` probes the
record store; the service keeps answering while Cassandra is unavailable,
so readiness reports ``degraded`` rather than failing the probe.
"""

import structlog
from cassandra import DriverException
from cassandra.cluster import NoHostAvailable
from fastapi import APIRouter

from rehabtrack.config import get_settings
from rehabtrack.core.database.async_cassandra import AsyncCassandraConnection


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness() -> dict[str, str | bool | float | None]:
    """Readiness probe - round-trips a query to Cassandra."""
    settings = get_settings()
    latency_ms = None

    if AsyncCassandraConnection.is_connected():
        try:
            latency_ms = await AsyncCassandraConnection.ping()
        except (DriverException, NoHostAvailable, ConnectionError) as e:
            logger.warning("readiness_probe_failed", error_type=type(e).__name__, error=str(e))

    database_ok = latency_ms is not None
    return {
        "status": "ready" if database_ok else "degraded",
        "environment": settings.environment,
        "database": database_ok,
        "database_latency_ms": latency_ms,
    }


@router.get("")
async def health() -> dict[str, str]:
    """Service identity for dashboards and smoke tests."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
