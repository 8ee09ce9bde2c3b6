"""Notification API routes."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.v1.dependencies import get_escalation_service, get_notification_service
from api.v1.schemas.common import CountEnvelope, CountResponse
from api.v1.schemas.escalation import EscalationListResponse, EscalationResponse
from api.v1.schemas.notification import (
    NotificationCreate,
    NotificationDetailResponse,
    NotificationListResponse,
    NotificationResponse,
)
from core.config import settings
from core.rate_limit import limiter
from domain.entities.notification import (
    NotificationCategory,
    NotificationFilter,
    NotificationPriority,
)
from domain.services.escalation_service import EscalationService
from domain.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])

# Recipient-scoped notification routes
recipient_notifications_router = APIRouter(
    prefix="/recipients/{recipient_id}/notifications",
    tags=["notifications"],
)


@router.post(
    "",
    response_model=NotificationDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a notification",
    responses={
        201: {"description": "Notification stored with its delivery decision"},
        422: {"description": "Validation error"},
    },
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def create_notification(
    request: Request,
    body: NotificationCreate,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationDetailResponse:
    """
    Create a notification for a recipient.

    The in-app record is always stored. The recipient's preferences decide
    which other channels fire now, which are deferred, and whether the
    notification is escalation-eligible.
    """
    notification = await service.create_notification(
        recipient_id=body.recipient_id,
        title=body.title,
        message=body.message,
        category=body.category,
        priority=body.priority,
        entity_type=body.entity_type,
        entity_id=body.entity_id,
        sender_id=body.sender_id,
        metadata=body.metadata,
    )
    return NotificationDetailResponse(data=NotificationResponse.model_validate(notification))


@router.get(
    "/{notification_id}",
    response_model=NotificationDetailResponse,
    summary="Get a notification",
    responses={
        200: {"description": "Notification details"},
        404: {"description": "Notification not found"},
    },
)
@limiter.limit("120/minute")  # type: ignore[untyped-decorator]
async def get_notification(
    request: Request,
    notification_id: UUID,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationDetailResponse:
    """Get a single notification by ID."""
    notification = await service.get_notification(notification_id)
    return NotificationDetailResponse(data=NotificationResponse.model_validate(notification))


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationDetailResponse,
    summary="Mark notification as read",
    responses={
        200: {"description": "Notification marked as read (idempotent)"},
        404: {"description": "Notification not found"},
    },
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def mark_read(
    request: Request,
    notification_id: UUID,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationDetailResponse:
    """Mark a notification as read. Repeating the call changes nothing."""
    notification = await service.mark_read(notification_id)
    return NotificationDetailResponse(data=NotificationResponse.model_validate(notification))


@router.patch(
    "/{notification_id}/acknowledge",
    response_model=NotificationDetailResponse,
    summary="Acknowledge a notification",
    responses={
        200: {"description": "Notification acknowledged (idempotent)"},
        404: {"description": "Notification not found"},
    },
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def acknowledge(
    request: Request,
    notification_id: UUID,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationDetailResponse:
    """
    Acknowledge a notification.

    Also marks it read if it was unread, and resolves its open escalation chain.
    """
    notification = await service.acknowledge(notification_id)
    return NotificationDetailResponse(data=NotificationResponse.model_validate(notification))


@router.get(
    "/{notification_id}/escalations",
    response_model=EscalationListResponse,
    summary="List a notification's escalation chain",
    responses={
        200: {"description": "Escalations ordered by level"},
        404: {"description": "Notification not found"},
    },
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def list_escalations(
    request: Request,
    notification_id: UUID,
    service: EscalationService = Depends(get_escalation_service),
) -> EscalationListResponse:
    """List the escalation chain of a notification, lowest level first."""
    escalations = await service.list_escalations(notification_id)
    current = max((e.escalation_level for e in escalations), default=0)
    return EscalationListResponse(
        data=[EscalationResponse.model_validate(e) for e in escalations],
        meta={"total": len(escalations), "current_level": current},
    )


# --- Recipient-scoped routes ---


@recipient_notifications_router.get(
    "",
    response_model=NotificationListResponse,
    summary="List a recipient's notifications",
    responses={
        200: {"description": "Filtered, paginated notifications"},
        400: {"description": "Invalid filter"},
    },
)
@limiter.limit("120/minute")  # type: ignore[untyped-decorator]
async def list_notifications(
    request: Request,
    recipient_id: UUID,
    category: list[NotificationCategory] | None = Query(None, description="Filter by category"),
    priority: list[NotificationPriority] | None = Query(None, description="Filter by priority"),
    is_read: bool | None = Query(None, description="Filter by read status"),
    is_acknowledged: bool | None = Query(None, description="Filter by acknowledged status"),
    created_from: datetime | None = Query(None, description="Created at or after"),
    created_to: datetime | None = Query(None, description="Created at or before"),
    entity_type: str | None = Query(None, description="Filter by entity type"),
    limit: int = Query(settings.default_page_size, ge=1, description="Page size"),
    offset: int = Query(0, ge=0, description="Rows to skip"),
    order: Literal["desc", "asc"] = Query("desc", description="Sort by created_at"),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    """List notifications for one recipient, newest first by default."""
    filter = NotificationFilter(
        categories=set(category) if category else None,
        priorities=set(priority) if priority else None,
        is_read=is_read,
        is_acknowledged=is_acknowledged,
        created_from=created_from,
        created_to=created_to,
        entity_type=entity_type,
        limit=limit,
        offset=offset,
        newest_first=order == "desc",
    )
    notifications = await service.list_notifications(recipient_id, filter)
    return NotificationListResponse(
        data=[NotificationResponse.model_validate(n) for n in notifications],
        meta={
            "count": len(notifications),
            "limit": filter.limit,
            "offset": filter.offset,
        },
    )


@recipient_notifications_router.post(
    "/mark-all-read",
    response_model=CountEnvelope,
    summary="Mark all notifications as read",
    responses={
        200: {"description": "Count of notifications marked"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def mark_all_read(
    request: Request,
    recipient_id: UUID,
    service: NotificationService = Depends(get_notification_service),
) -> CountEnvelope:
    """Mark every unread notification of the recipient as read."""
    count = await service.mark_all_read(recipient_id)
    return CountEnvelope(data=CountResponse(count=count))
