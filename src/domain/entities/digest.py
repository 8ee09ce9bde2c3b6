"""Digest value objects. Digests are computed, never stored."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from domain.entities.notification import Notification
from domain.entities.preferences import DigestFrequency


@dataclass(frozen=True, slots=True)
class DigestPeriod:
    """Half-open window ``[start, end)``."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


@dataclass(frozen=True)
class Digest:
    """Windowed summary of one recipient's notifications."""

    recipient_id: UUID
    period: DigestPeriod
    frequency: DigestFrequency
    notifications: tuple[Notification, ...]
    delivery_schedule: datetime
    generated_at: datetime
    by_category: dict[str, list[Notification]] = field(default_factory=dict)
    counts_by_category: dict[str, int] = field(default_factory=dict)
    counts_by_priority: dict[str, int] = field(default_factory=dict)
    unread_count: int = 0

    @property
    def total(self) -> int:
        return len(self.notifications)

    @property
    def notification_ids(self) -> frozenset[UUID]:
        return frozenset(n.id for n in self.notifications)
