"""Notification statistics API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import get_stats_service
from api.v1.schemas.stats import StatsDetailResponse, StatsResponse
from core.rate_limit import limiter
from domain.services.stats_service import StatsService

router = APIRouter(prefix="/recipients/{recipient_id}/stats", tags=["stats"])


@router.get(
    "",
    response_model=StatsDetailResponse,
    summary="Get notification statistics",
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def get_stats(
    request: Request,
    recipient_id: UUID,
    service: StatsService = Depends(get_stats_service),
) -> StatsDetailResponse:
    """Totals, unread and unacknowledged counts, and breakdowns by category and priority."""
    stats = await service.get_stats(recipient_id)
    return StatsDetailResponse(data=StatsResponse.model_validate(stats))
