"""Notification repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.notification import Notification, NotificationFilter


class INotificationRepository(Protocol):
    """Repository interface for Notification entities."""

    async def create(self, notification: Notification) -> Notification:
        """Persist a new notification."""
        ...

    async def get(self, notification_id: UUID) -> Notification | None:
        """Get a notification by ID."""
        ...

    async def save_state(self, notification: Notification) -> Notification:
        """Persist the read/acknowledge timestamps of a notification."""
        ...

    async def list_for_recipient(
        self, recipient_id: UUID, filter: NotificationFilter
    ) -> list[Notification]:
        """List a recipient's notifications matching the filter."""
        ...

    async def list_in_window(
        self, recipient_id: UUID, start: datetime, end: datetime
    ) -> list[Notification]:
        """Notifications with ``start <= created_at < end``, oldest first."""
        ...

    async def mark_all_read(self, recipient_id: UUID, read_at: datetime) -> int:
        """Mark every unread notification read. Returns count updated."""
        ...

    async def count_by_state(
        self, recipient_id: UUID
    ) -> list[tuple[str, str, bool, bool, int]]:
        """Counts grouped by (category, priority, is_read, is_acknowledged)."""
        ...

    async def list_escalation_candidates(
        self,
        priorities: list[str],
        created_before: datetime,
        limit: int = 500,
    ) -> list[Notification]:
        """Unacknowledged, escalation-eligible notifications older than a cutoff.

        Resolved chains and chains already at the top level are left out.
        """
        ...
