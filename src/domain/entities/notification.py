"""Notification domain entities and enumerations."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID, uuid4

from core.clock import utcnow


class NotificationCategory(StrEnum):
    """Business area a notification belongs to."""

    SCHEDULE = "schedule"
    AVAILABILITY = "availability"
    ASSIGNMENT = "assignment"
    SYSTEM = "system"
    COMPLIANCE = "compliance"
    EMERGENCY = "emergency"


class NotificationPriority(StrEnum):
    """Notification priority, ordered from lowest to highest."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    def at_least(self, other: "NotificationPriority") -> bool:
        return self.rank >= other.rank


_PRIORITY_RANK = {
    NotificationPriority.LOW: 0,
    NotificationPriority.NORMAL: 1,
    NotificationPriority.HIGH: 2,
    NotificationPriority.CRITICAL: 3,
}


class DeliveryChannel(StrEnum):
    """Channels a notification can be delivered through."""

    IN_APP = "in_app"
    EMAIL = "email"
    SMS = "sms"


class NotificationState(StrEnum):
    """Lifecycle state, derived from the read/acknowledge timestamps."""

    UNREAD = "unread"
    READ = "read"
    ACKNOWLEDGED = "acknowledged"


@dataclass(frozen=True, slots=True)
class DeliveryDecision:
    """Outcome of applying a recipient's preferences to one notification."""

    in_app: bool = True
    immediate_channels: frozenset[DeliveryChannel] = frozenset()
    deferred_channels: frozenset[DeliveryChannel] = frozenset()
    deferred_until: datetime | None = None
    include_in_digest: bool = False
    escalation_eligible: bool = False
    reason: str = "default"


@dataclass
class Notification:
    """Domain entity for one addressed alert."""

    recipient_id: UUID
    category: NotificationCategory
    title: str
    message: str
    priority: NotificationPriority = NotificationPriority.NORMAL
    id: UUID = field(default_factory=uuid4)
    sender_id: UUID | None = None
    entity_type: str | None = None
    entity_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    delivery_channels: list[DeliveryChannel] = field(default_factory=list)
    deferred_channels: list[DeliveryChannel] = field(default_factory=list)
    deferred_until: datetime | None = None
    include_in_digest: bool = False
    escalation_eligible: bool = False
    created_at: datetime = field(default_factory=utcnow)
    read_at: datetime | None = None
    acknowledged_at: datetime | None = None

    @property
    def state(self) -> NotificationState:
        if self.acknowledged_at is not None:
            return NotificationState.ACKNOWLEDGED
        if self.read_at is not None:
            return NotificationState.READ
        return NotificationState.UNREAD

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    @property
    def is_acknowledged(self) -> bool:
        return self.acknowledged_at is not None

    def apply_decision(self, decision: DeliveryDecision) -> None:
        """Record the delivery decision on the notification."""
        self.delivery_channels = sorted(decision.immediate_channels)
        self.deferred_channels = sorted(decision.deferred_channels)
        self.deferred_until = decision.deferred_until
        self.include_in_digest = decision.include_in_digest
        self.escalation_eligible = decision.escalation_eligible

    def mark_read(self, at: datetime) -> bool:
        """Set ``read_at`` once. Returns True if the state changed."""
        if self.read_at is not None:
            return False
        self.read_at = at
        return True

    def acknowledge(self, at: datetime) -> bool:
        """Set ``acknowledged_at`` (and ``read_at`` if unset) once."""
        if self.acknowledged_at is not None:
            return False
        if self.read_at is None:
            self.read_at = at
        self.acknowledged_at = max(at, self.read_at)
        return True


@dataclass
class NotificationFilter:
    """Typed filter for listing a recipient's notifications."""

    categories: set[NotificationCategory] | None = None
    priorities: set[NotificationPriority] | None = None
    is_read: bool | None = None
    is_acknowledged: bool | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    entity_type: str | None = None
    limit: int = 50
    offset: int = 0
    newest_first: bool = True


@dataclass(frozen=True, slots=True)
class NotificationStats:
    """Read-only counts over one recipient's notifications."""

    total: int
    unread: int
    unacknowledged: int
    by_category: dict[str, int]
    by_priority: dict[str, int]
