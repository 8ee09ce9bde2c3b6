"""Pydantic schemas for Notification API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.notification import (
    DeliveryChannel,
    NotificationCategory,
    NotificationPriority,
    NotificationState,
)


class NotificationCreate(BaseModel):
    """Schema for creating a Notification."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "recipient_id": "123e4567-e89b-12d3-a456-426614174000",
                "title": "Shift changed",
                "message": "Your Tuesday shift now starts at 07:00",
                "category": "schedule",
                "priority": "high",
                "entity_type": "shift",
                "entity_id": "shift-8812",
            }
        },
    )

    recipient_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    category: NotificationCategory
    priority: NotificationPriority = NotificationPriority.NORMAL
    entity_type: str | None = Field(None, max_length=50)
    entity_id: str | None = Field(None, max_length=100)
    sender_id: UUID | None = None
    metadata: dict[str, Any] | None = None


class NotificationResponse(BaseModel):
    """Single notification with its delivery decision and lifecycle state."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    recipient_id: UUID
    sender_id: UUID | None = None
    category: NotificationCategory
    priority: NotificationPriority
    title: str
    message: str
    entity_type: str | None = None
    entity_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    state: NotificationState
    is_read: bool
    is_acknowledged: bool
    delivery_channels: list[DeliveryChannel]
    deferred_channels: list[DeliveryChannel]
    deferred_until: datetime | None = None
    include_in_digest: bool
    escalation_eligible: bool
    created_at: datetime
    read_at: datetime | None = None
    acknowledged_at: datetime | None = None


class NotificationListResponse(BaseModel):
    """Paginated notification list response."""

    data: list[NotificationResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class NotificationDetailResponse(BaseModel):
    """Schema for single Notification response."""

    data: NotificationResponse
    meta: dict[str, Any] = Field(default_factory=dict)
