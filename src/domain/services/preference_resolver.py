"""Preference resolution: which channels fire for a notification, and when."""

from datetime import UTC, datetime, time, timedelta

from domain.entities.notification import (
    DeliveryChannel,
    DeliveryDecision,
    Notification,
    NotificationCategory,
    NotificationPriority,
)
from domain.entities.preferences import (
    NotificationFrequency,
    NotificationPreferences,
    parse_quiet_time,
)

EXTERNAL_CHANNELS = (DeliveryChannel.EMAIL, DeliveryChannel.SMS)
SATURDAY = 5


def is_in_quiet_hours(moment: time, start: time, end: time) -> bool:
    """Whether ``moment`` falls inside the ``[start, end)`` window.

    A window with ``start > end`` spans midnight. An empty window
    (``start == end``) never matches.
    """
    if start == end:
        return False
    if start > end:
        return moment >= start or moment < end
    return start <= moment < end


def next_occurrence(local_now: datetime, at: time) -> datetime:
    """The next local wall-clock time ``at`` strictly after ``local_now``."""
    candidate = local_now.replace(hour=at.hour, minute=at.minute, second=0, microsecond=0)
    if candidate <= local_now:
        candidate += timedelta(days=1)
    return candidate


def is_override(notification: Notification) -> bool:
    """Emergency or critical notifications ignore timing rules."""
    return (
        notification.category == NotificationCategory.EMERGENCY
        or notification.priority == NotificationPriority.CRITICAL
    )


class PreferenceResolver:
    """Apply a recipient's preferences to one notification.

    Resolution never fails. Rules, in order:

    1. The in-app record is always created.
    2. Below the recipient's priority floor: no channel delivery and no
       escalation; the notification still shows up in digests and stats.
    3. ``disabled`` frequency or no enabled channel for the category: in-app only.
    4. Emergency category or critical priority fire immediately, ignoring
       weekend, quiet hours and batching.
    5. Weekend suppression when ``weekend_notifications`` is off.
    6. Quiet hours defer delivery until the window ends.
    7. ``hourly``/``daily``/``weekly`` frequencies hand channels to the batch flush.
    8. Otherwise channels fire immediately.
    """

    def resolve(
        self,
        notification: Notification,
        preferences: NotificationPreferences | None,
        now: datetime,
    ) -> DeliveryDecision:
        if preferences is None:
            return DeliveryDecision(escalation_eligible=True, reason="no_preferences")

        include_in_digest = preferences.email_digest_enabled

        if not notification.priority.at_least(preferences.minimum_priority):
            return DeliveryDecision(
                include_in_digest=include_in_digest,
                escalation_eligible=False,
                reason="below_minimum_priority",
            )

        common = {"include_in_digest": include_in_digest, "escalation_eligible": True}

        if preferences.notification_frequency == NotificationFrequency.DISABLED:
            return DeliveryDecision(reason="frequency_disabled", **common)

        channels = frozenset(
            c for c in EXTERNAL_CHANNELS
            if preferences.channel_enabled(notification.category, c)
        )
        if not channels:
            return DeliveryDecision(reason="channels_disabled", **common)

        # Overrides are the "critical" class: they also skip the weekend rule.
        if is_override(notification):
            return DeliveryDecision(immediate_channels=channels, reason="override", **common)

        local_now = now.replace(tzinfo=UTC).astimezone(preferences.zone)

        if not preferences.weekend_notifications and local_now.weekday() >= SATURDAY:
            return DeliveryDecision(reason="weekend_suppressed", **common)

        if preferences.has_quiet_hours:
            start = parse_quiet_time(preferences.quiet_hours_start or "")
            end = parse_quiet_time(preferences.quiet_hours_end or "")
            if is_in_quiet_hours(local_now.time(), start, end):
                resume_at = next_occurrence(local_now, end)
                return DeliveryDecision(
                    deferred_channels=channels,
                    deferred_until=resume_at.astimezone(UTC).replace(tzinfo=None),
                    reason="quiet_hours",
                    **common,
                )

        if preferences.notification_frequency != NotificationFrequency.IMMEDIATE:
            return DeliveryDecision(
                deferred_channels=channels,
                reason=f"batched_{preferences.notification_frequency.value}",
                **common,
            )

        return DeliveryDecision(immediate_channels=channels, reason="immediate", **common)
