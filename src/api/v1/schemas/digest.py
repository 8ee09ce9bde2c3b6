"""Pydantic schemas for Digest API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from api.v1.schemas.common import BatchResultResponse
from api.v1.schemas.notification import NotificationResponse
from domain.entities.digest import Digest
from domain.entities.preferences import DigestFrequency


class DigestCreate(BaseModel):
    """Schema for building a digest over ``[start, end)``."""

    recipient_id: UUID
    frequency: DigestFrequency = DigestFrequency.DAILY
    start: datetime | None = None
    end: datetime | None = None


class DigestRunRequest(BaseModel):
    """Schema for running scheduled digests for every opted-in recipient."""

    frequency: DigestFrequency = DigestFrequency.DAILY
    now: datetime | None = None


class DigestResponse(BaseModel):
    """Schema for Digest response."""

    recipient_id: UUID
    frequency: DigestFrequency
    period_start: datetime
    period_end: datetime
    delivery_schedule: datetime
    generated_at: datetime
    total: int
    unread_count: int
    counts_by_category: dict[str, int]
    counts_by_priority: dict[str, int]
    notifications_by_category: dict[str, list[UUID]]
    notifications: list[NotificationResponse]

    @classmethod
    def from_digest(cls, digest: Digest) -> "DigestResponse":
        return cls(
            recipient_id=digest.recipient_id,
            frequency=digest.frequency,
            period_start=digest.period.start,
            period_end=digest.period.end,
            delivery_schedule=digest.delivery_schedule,
            generated_at=digest.generated_at,
            total=digest.total,
            unread_count=digest.unread_count,
            counts_by_category=digest.counts_by_category,
            counts_by_priority=digest.counts_by_priority,
            notifications_by_category={
                category: [n.id for n in items]
                for category, items in digest.by_category.items()
            },
            notifications=[
                NotificationResponse.model_validate(n) for n in digest.notifications
            ],
        )


class DigestDetailResponse(BaseModel):
    """Schema for single Digest response."""

    data: DigestResponse
    meta: dict[str, Any] = Field(default_factory=dict)


class DigestRunResponse(BaseModel):
    """Digests built by a scheduled run plus the per-recipient outcome."""

    data: list[DigestResponse]
    meta: BatchResultResponse
