"""Escalation domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from core.clock import utcnow

MAX_ESCALATION_LEVEL = 5


@dataclass
class Escalation:
    """An unacknowledged notification raised one level higher."""

    original_notification_id: UUID
    recipient_id: UUID
    escalation_level: int
    reason: str
    id: UUID = field(default_factory=uuid4)
    escalated_to: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    resolved_at: datetime | None = None

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None
