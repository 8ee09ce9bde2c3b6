"""Escalation API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.v1.dependencies import get_escalation_service
from api.v1.schemas.common import BatchResultEnvelope, BatchResultResponse
from api.v1.schemas.escalation import (
    EscalationCreate,
    EscalationDetailResponse,
    EscalationResponse,
)
from core.rate_limit import limiter
from domain.services.escalation_service import EscalationService

router = APIRouter(prefix="/escalations", tags=["escalations"])


@router.post(
    "",
    response_model=EscalationDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Escalate a notification",
    responses={
        201: {"description": "Escalation created"},
        400: {"description": "Level outside 1..5 or missing reason"},
        404: {"description": "Original notification not found"},
        409: {"description": "Level does not exceed the current chain level"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def create_escalation(
    request: Request,
    body: EscalationCreate,
    service: EscalationService = Depends(get_escalation_service),
) -> EscalationDetailResponse:
    """
    Raise a notification to the next escalation level.

    Levels must be strictly increasing per notification. Escalating an
    already acknowledged notification stores the record already resolved.
    """
    escalation = await service.create_escalation(
        original_notification_id=body.original_notification_id,
        recipient_id=body.recipient_id,
        level=body.escalation_level,
        reason=body.reason,
        escalated_to=body.escalated_to,
    )
    return EscalationDetailResponse(data=EscalationResponse.model_validate(escalation))


@router.post(
    "/sweep",
    response_model=BatchResultEnvelope,
    summary="Escalate overdue notifications",
    responses={
        200: {"description": "Per-notification outcome of the sweep"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def escalate_overdue(
    request: Request,
    service: EscalationService = Depends(get_escalation_service),
) -> BatchResultEnvelope:
    """Escalate every eligible notification left unacknowledged past the timeout."""
    result = await service.escalate_overdue()
    return BatchResultEnvelope(data=BatchResultResponse.model_validate(result))


@router.post(
    "/{escalation_id}/resolve",
    response_model=EscalationDetailResponse,
    summary="Resolve an escalation chain",
    responses={
        200: {"description": "Escalation resolved (idempotent)"},
        404: {"description": "Escalation not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def resolve_escalation(
    request: Request,
    escalation_id: UUID,
    service: EscalationService = Depends(get_escalation_service),
) -> EscalationDetailResponse:
    """Resolve the escalation and every open level of its chain."""
    escalation = await service.resolve_escalation(escalation_id)
    return EscalationDetailResponse(data=EscalationResponse.model_validate(escalation))
