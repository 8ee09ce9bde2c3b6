"""Pydantic schemas for Escalation API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EscalationCreate(BaseModel):
    """Schema for creating an Escalation.

    The level range is checked by the service so out-of-range levels
    report ``INVALID_ESCALATION_LEVEL``.
    """

    original_notification_id: UUID
    recipient_id: UUID
    escalation_level: int
    reason: str = Field(..., min_length=1)
    escalated_to: str | None = Field(None, max_length=255)


class EscalationResponse(BaseModel):
    """Schema for Escalation response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    original_notification_id: UUID
    recipient_id: UUID
    escalation_level: int
    reason: str
    escalated_to: str | None = None
    created_at: datetime
    resolved_at: datetime | None = None
    is_resolved: bool


class EscalationDetailResponse(BaseModel):
    """Schema for single Escalation response."""

    data: EscalationResponse
    meta: dict[str, Any] = Field(default_factory=dict)


class EscalationListResponse(BaseModel):
    """An escalation chain, ordered by level."""

    data: list[EscalationResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
