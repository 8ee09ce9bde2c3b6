"""Notification preference entities and their write-time validation."""

import re
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, time
from enum import StrEnum
from typing import Any
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.clock import utcnow
from core.exceptions import InvalidPreferenceError
from domain.entities.notification import (
    DeliveryChannel,
    NotificationCategory,
    NotificationPriority,
)

QUIET_HOURS_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


class NotificationFrequency(StrEnum):
    """Pacing of non-in-app channel delivery."""

    IMMEDIATE = "immediate"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    DISABLED = "disabled"


class DigestFrequency(StrEnum):
    """How often a digest summarises a recipient's notifications."""

    DAILY = "daily"
    WEEKLY = "weekly"


@dataclass(frozen=True, slots=True)
class CategoryChannels:
    """Channel toggles for one notification category."""

    in_app: bool = True
    email: bool = True
    sms: bool = False

    def allows(self, channel: DeliveryChannel) -> bool:
        return bool(getattr(self, channel.value))


def default_channels() -> dict[NotificationCategory, CategoryChannels]:
    channels = {category: CategoryChannels() for category in NotificationCategory}
    channels[NotificationCategory.EMERGENCY] = CategoryChannels(sms=True)
    return channels


def parse_quiet_time(value: str) -> time:
    """Parse an ``HH:MM`` 24-hour string."""
    match = QUIET_HOURS_PATTERN.match(value)
    if not match:
        raise ValueError(f"expected HH:MM 24-hour time, got {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


@dataclass
class NotificationPreferences:
    """One recipient's delivery preferences."""

    recipient_id: UUID
    id: UUID = field(default_factory=uuid4)
    channels: dict[NotificationCategory, CategoryChannels] = field(
        default_factory=default_channels
    )
    notification_frequency: NotificationFrequency = NotificationFrequency.IMMEDIATE
    email_digest_enabled: bool = True
    email_digest_frequency: DigestFrequency = DigestFrequency.DAILY
    minimum_priority: NotificationPriority = NotificationPriority.LOW
    quiet_hours_start: str | None = None
    quiet_hours_end: str | None = None
    weekend_notifications: bool = True
    timezone: str = "UTC"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def has_quiet_hours(self) -> bool:
        return bool(self.quiet_hours_start and self.quiet_hours_end)

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def channel_enabled(
        self, category: NotificationCategory, channel: DeliveryChannel
    ) -> bool:
        return self.channels.get(category, CategoryChannels()).allows(channel)


@dataclass
class PreferencesPatch:
    """Partial update of NotificationPreferences.

    Every field is optional; ``None`` means "leave unchanged". Values are
    validated by ``apply_to()`` before they are merged, and only the fields
    declared here can ever be applied.
    """

    channels: dict[str, dict[str, bool]] | None = None
    notification_frequency: str | None = None
    email_digest_enabled: bool | None = None
    email_digest_frequency: str | None = None
    minimum_priority: str | None = None
    quiet_hours_start: str | None = None
    quiet_hours_end: str | None = None
    clear_quiet_hours: bool = False
    weekend_notifications: bool | None = None
    timezone: str | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "PreferencesPatch":
        """Build a patch from an arbitrary mapping, ignoring unknown keys."""
        allowed = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in allowed})

    def apply_to(self, prefs: NotificationPreferences) -> NotificationPreferences:
        """Validate and merge into ``prefs``, returning a new object."""
        changes: dict[str, Any] = {}

        if self.channels is not None:
            changes["channels"] = _merge_channels(prefs.channels, self.channels)
        if self.notification_frequency is not None:
            changes["notification_frequency"] = _enum_value(
                NotificationFrequency, "notification_frequency", self.notification_frequency
            )
        if self.email_digest_enabled is not None:
            changes["email_digest_enabled"] = _bool_value(
                "email_digest_enabled", self.email_digest_enabled
            )
        if self.email_digest_frequency is not None:
            changes["email_digest_frequency"] = _enum_value(
                DigestFrequency, "email_digest_frequency", self.email_digest_frequency
            )
        if self.minimum_priority is not None:
            changes["minimum_priority"] = _enum_value(
                NotificationPriority, "minimum_priority", self.minimum_priority
            )
        if self.weekend_notifications is not None:
            changes["weekend_notifications"] = _bool_value(
                "weekend_notifications", self.weekend_notifications
            )
        if self.timezone is not None:
            changes["timezone"] = _timezone_value(self.timezone)

        if self.clear_quiet_hours:
            changes["quiet_hours_start"] = None
            changes["quiet_hours_end"] = None
        else:
            if self.quiet_hours_start is not None:
                changes["quiet_hours_start"] = _quiet_time_value(
                    "quiet_hours_start", self.quiet_hours_start
                )
            if self.quiet_hours_end is not None:
                changes["quiet_hours_end"] = _quiet_time_value(
                    "quiet_hours_end", self.quiet_hours_end
                )

        updated = replace(prefs, **changes)
        if bool(updated.quiet_hours_start) != bool(updated.quiet_hours_end):
            raise InvalidPreferenceError(
                "quiet_hours",
                f"{updated.quiet_hours_start}-{updated.quiet_hours_end}",
                "quiet_hours_start and quiet_hours_end must be set together",
            )
        if updated.has_quiet_hours and updated.quiet_hours_start == updated.quiet_hours_end:
            raise InvalidPreferenceError(
                "quiet_hours",
                updated.quiet_hours_start,
                "quiet hours start and end must differ",
            )
        return updated


def _enum_value(enum_cls: type[StrEnum], field_name: str, value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)  # type: ignore[attr-defined]
        raise InvalidPreferenceError(field_name, value, f"must be one of {allowed}") from None


def _bool_value(field_name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise InvalidPreferenceError(field_name, value, "must be a boolean")
    return value


def _quiet_time_value(field_name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidPreferenceError(field_name, value, "must be an HH:MM string")
    try:
        parsed = parse_quiet_time(value)
    except ValueError as exc:
        raise InvalidPreferenceError(field_name, value, str(exc)) from None
    return parsed.strftime("%H:%M")


def _timezone_value(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidPreferenceError("timezone", value, "must be an IANA time zone name")
    # Directory names such as "America" raise IsADirectoryError, an OSError.
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise InvalidPreferenceError("timezone", value, "unknown time zone") from None
    return value


def _merge_channels(
    current: dict[NotificationCategory, CategoryChannels],
    patch: dict[str, dict[str, bool]],
) -> dict[NotificationCategory, CategoryChannels]:
    if not isinstance(patch, dict):
        raise InvalidPreferenceError("channels", patch, "must map categories to channel toggles")
    merged = dict(current)
    channel_names = {c.value for c in DeliveryChannel}
    for raw_category, toggles in patch.items():
        category = _enum_value(NotificationCategory, "channels", raw_category)
        if not isinstance(toggles, dict):
            raise InvalidPreferenceError(
                f"channels.{category.value}", toggles, "must map channels to booleans"
            )
        unknown = set(toggles) - channel_names
        if unknown:
            raise InvalidPreferenceError(
                f"channels.{category.value}",
                ", ".join(sorted(unknown)),
                f"unknown channel; expected {', '.join(sorted(channel_names))}",
            )
        for name, enabled in toggles.items():
            _bool_value(f"channels.{category.value}.{name}", enabled)
        merged[category] = replace(merged.get(category, CategoryChannels()), **toggles)
    return merged
