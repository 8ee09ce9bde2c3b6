"""Escalation repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.escalation import Escalation


class IEscalationRepository(Protocol):
    """Repository interface for Escalation entities."""

    async def create(self, escalation: Escalation) -> Escalation:
        """Persist a new escalation.

        Raises EscalationLevelConflictError if the level already exists
        for the original notification.
        """
        ...

    async def get(self, escalation_id: UUID) -> Escalation | None:
        """Get an escalation by ID."""
        ...

    async def list_for_notification(self, notification_id: UUID) -> list[Escalation]:
        """The escalation chain of a notification, ordered by level."""
        ...

    async def get_max_level(self, notification_id: UUID) -> int:
        """Highest existing level for a notification (0 if none)."""
        ...

    async def resolve_open(self, notification_id: UUID, resolved_at: datetime) -> int:
        """Resolve every unresolved escalation of a chain. Returns count updated."""
        ...
