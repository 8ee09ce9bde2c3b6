"""Digest API routes."""

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import get_digest_service
from api.v1.schemas.common import BatchResultResponse
from api.v1.schemas.digest import (
    DigestCreate,
    DigestDetailResponse,
    DigestResponse,
    DigestRunRequest,
    DigestRunResponse,
)
from core.rate_limit import limiter
from domain.services.digest_service import DigestService

router = APIRouter(prefix="/digests", tags=["digests"])


@router.post(
    "",
    response_model=DigestDetailResponse,
    summary="Build a digest",
    responses={
        200: {"description": "Digest over the half-open window [start, end)"},
        400: {"description": "Window end is not after its start"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def create_digest(
    request: Request,
    body: DigestCreate,
    service: DigestService = Depends(get_digest_service),
) -> DigestDetailResponse:
    """
    Build a recipient's digest.

    Missing bounds default from the frequency: the last 24 hours for daily,
    the last 7 days for weekly. Building the same window twice returns the
    same notifications.
    """
    digest = await service.build_digest(
        body.recipient_id, body.frequency, body.start, body.end
    )
    return DigestDetailResponse(data=DigestResponse.from_digest(digest))


@router.post(
    "/run",
    response_model=DigestRunResponse,
    summary="Run scheduled digests",
    responses={
        200: {"description": "Non-empty digests and the per-recipient outcome"},
    },
)
@limiter.limit("5/minute")  # type: ignore[untyped-decorator]
async def run_scheduled_digests(
    request: Request,
    body: DigestRunRequest,
    service: DigestService = Depends(get_digest_service),
) -> DigestRunResponse:
    """Build the default-window digest for every recipient opted in at the frequency."""
    digests, result = await service.run_scheduled_digests(body.frequency, body.now)
    return DigestRunResponse(
        data=[DigestResponse.from_digest(d) for d in digests],
        meta=BatchResultResponse.model_validate(result),
    )
