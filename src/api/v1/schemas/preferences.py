"""Pydantic schemas for NotificationPreferences API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.preferences import NotificationPreferences


class CategoryChannelsSchema(BaseModel):
    """Per-category channel toggles."""

    model_config = ConfigDict(from_attributes=True)

    in_app: bool
    email: bool
    sms: bool


class PreferencesUpdate(BaseModel):
    """Partial preferences update.

    Values are checked by the domain so a bad value reports
    ``INVALID_PREFERENCE``; unknown fields are ignored.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "quiet_hours_start": "22:00",
                "quiet_hours_end": "06:00",
                "timezone": "Europe/Berlin",
                "channels": {"schedule": {"sms": True}},
            }
        },
    )

    channels: dict[str, Any] | None = None
    notification_frequency: str | None = None
    email_digest_enabled: bool | None = None
    email_digest_frequency: str | None = None
    minimum_priority: str | None = None
    quiet_hours_start: str | None = None
    quiet_hours_end: str | None = None
    clear_quiet_hours: bool = False
    weekend_notifications: bool | None = None
    timezone: str | None = None


class PreferencesResponse(BaseModel):
    """Schema for NotificationPreferences response."""

    id: UUID
    recipient_id: UUID
    channels: dict[str, CategoryChannelsSchema]
    notification_frequency: str
    email_digest_enabled: bool
    email_digest_frequency: str
    minimum_priority: str
    quiet_hours_start: str | None = None
    quiet_hours_end: str | None = None
    weekend_notifications: bool
    timezone: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, prefs: NotificationPreferences) -> "PreferencesResponse":
        return cls(
            id=prefs.id,
            recipient_id=prefs.recipient_id,
            channels={
                category.value: CategoryChannelsSchema.model_validate(toggles)
                for category, toggles in prefs.channels.items()
            },
            notification_frequency=prefs.notification_frequency.value,
            email_digest_enabled=prefs.email_digest_enabled,
            email_digest_frequency=prefs.email_digest_frequency.value,
            minimum_priority=prefs.minimum_priority.value,
            quiet_hours_start=prefs.quiet_hours_start,
            quiet_hours_end=prefs.quiet_hours_end,
            weekend_notifications=prefs.weekend_notifications,
            timezone=prefs.timezone,
            created_at=prefs.created_at,
            updated_at=prefs.updated_at,
        )


class PreferencesDetailResponse(BaseModel):
    """Schema for single preferences response."""

    data: PreferencesResponse
    meta: dict[str, Any] = Field(default_factory=dict)
