"""Pydantic schemas for notification statistics."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StatsResponse(BaseModel):
    """Counts over one recipient's notifications."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    unread: int
    unacknowledged: int
    by_category: dict[str, int]
    by_priority: dict[str, int]


class StatsDetailResponse(BaseModel):
    """Schema for stats response."""

    data: StatsResponse
    meta: dict[str, Any] = Field(default_factory=dict)
