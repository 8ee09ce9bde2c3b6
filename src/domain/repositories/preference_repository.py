"""Notification preference repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.preferences import DigestFrequency, NotificationPreferences


class IPreferenceRepository(Protocol):
    """Repository interface for NotificationPreferences. Pure data access."""

    async def get(self, recipient_id: UUID) -> NotificationPreferences | None:
        """Get a recipient's preferences, if any were ever stored."""
        ...

    async def save(self, prefs: NotificationPreferences) -> NotificationPreferences:
        """Insert or update a recipient's preferences."""
        ...

    async def list_digest_recipients(self, frequency: DigestFrequency) -> list[UUID]:
        """Recipients with digests enabled at the given frequency."""
        ...
