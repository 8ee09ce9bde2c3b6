"""Health check endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from core.clock import utcnow
from core.config import settings
from infrastructure.database.session import check_store, get_async_session

router = APIRouter(tags=["health"])

SERVICE_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None
    escalation_sweep: str | None = None


def _sweep_status() -> str:
    interval = settings.escalation_sweep_interval_seconds
    return f"every {interval}s" if interval > 0 else "disabled"


@router.get("/health", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """
    Liveness probe for load balancers.

    Does not touch the notification store.
    """
    return HealthResponse(
        status="healthy",
        version=SERVICE_VERSION,
        timestamp=utcnow().isoformat(),
        environment=settings.app_env,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check(
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """
    Readiness probe: notification store connectivity and escalation sweep schedule.

    A store that does not answer reports ``degraded`` rather than failing the probe.
    """
    db_status = await check_store(db)
    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        version=SERVICE_VERSION,
        timestamp=utcnow().isoformat(),
        environment=settings.app_env,
        database=db_status,
        escalation_sweep=_sweep_status(),
    )
