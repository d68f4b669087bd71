"""
Monitoring Routes

Liveness and readiness checks for load balancers and orchestrators.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text

from hireflow.config import settings
from hireflow.database import DatabaseRegistry, get_registry

router = APIRouter(tags=["Monitoring"])
logger = logging.getLogger(__name__)

# Application start time for uptime calculation
APP_START_TIME = time.time()


class HealthStatus(BaseModel):
    status: str
    timestamp: str
    version: str
    uptime_seconds: float


class ReadinessStatus(BaseModel):
    status: str
    timestamp: str
    checks: dict[str, dict[str, Any]]


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """
    Liveness check endpoint.

    The handler itself touches no database, but TenantMiddleware runs first
    and opens the master database on the first request. While the master is
    unreachable it answers 500 TENANT_RESOLUTION_ERROR like every
    other route.
    """
    return HealthStatus(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app_version,
        uptime_seconds=round(time.time() - APP_START_TIME, 2),
    )


@router.get("/ready", response_model=ReadinessStatus)
async def readiness_check(response: Response, registry: DatabaseRegistry = Depends(get_registry)) -> ReadinessStatus:
    """
    Readiness check endpoint.

    Pings the master database and reports how many tenant handles are cached.
    """
    checks: dict[str, dict[str, Any]] = {}
    healthy = True

    start = time.perf_counter()
    try:
        async with registry.get_master_handle().connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["master_database"] = {
            "status": "healthy",
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
        }
    except Exception as e:
        logger.warning("Readiness check failed for master database: %s", e)
        checks["master_database"] = {"status": "unhealthy", "error": type(e).__name__}
        healthy = False

    checks["tenant_connections"] = {"status": "healthy", "cached": len(registry.cached_identifiers())}

    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessStatus(
        status="ready" if healthy else "not_ready",
        timestamp=datetime.now(timezone.utc).isoformat(),
        checks=checks,
    )
