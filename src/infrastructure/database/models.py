"""SQLAlchemy ORM models."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from core.clock import utcnow


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class NotificationModel(Base):
    """Notification record. Rows are never deleted."""

    __tablename__ = "notifications"
    __table_args__ = (
        CheckConstraint(
            "category IN ('schedule', 'availability', 'assignment', "
            "'system', 'compliance', 'emergency')",
            name="ck_notifications_category",
        ),
        CheckConstraint(
            "priority IN ('low', 'normal', 'high', 'critical')",
            name="ck_notifications_priority",
        ),
        CheckConstraint(
            "acknowledged_at IS NULL OR (read_at IS NOT NULL AND read_at <= acknowledged_at)",
            name="ck_notifications_ack_after_read",
        ),
        Index("idx_notifications_recipient_created", "recipient_id", "created_at"),
        Index("idx_notifications_entity", "entity_type", "entity_id"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    recipient_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    sender_id: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="normal")
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(50))
    entity_id: Mapped[str | None] = mapped_column(String(100))
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONB)
    delivery_channels: Mapped[list[str]] = mapped_column(JSONB, default=list)
    deferred_channels: Mapped[list[str]] = mapped_column(JSONB, default=list)
    deferred_until: Mapped[datetime | None] = mapped_column(DateTime)
    include_in_digest: Mapped[bool] = mapped_column(Boolean, default=False)
    escalation_eligible: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime)
    acknowledged_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Relationships
    escalations: Mapped[list["EscalationModel"]] = relationship(
        "EscalationModel",
        back_populates="notification",
        order_by="EscalationModel.escalation_level",
    )


class NotificationPreferencesModel(Base):
    """Per-recipient delivery preferences (one row per recipient)."""

    __tablename__ = "notification_preferences"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    recipient_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), nullable=False, unique=True
    )
    channels: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    notification_frequency: Mapped[str] = mapped_column(
        String(10), nullable=False, default="immediate"
    )
    email_digest_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    email_digest_frequency: Mapped[str] = mapped_column(String(10), nullable=False, default="daily")
    minimum_priority: Mapped[str] = mapped_column(String(10), nullable=False, default="low")
    quiet_hours_start: Mapped[str | None] = mapped_column(String(5))
    quiet_hours_end: Mapped[str | None] = mapped_column(String(5))
    weekend_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )


class EscalationModel(Base):
    """One level of an escalation chain."""

    __tablename__ = "notification_escalations"
    __table_args__ = (
        UniqueConstraint(
            "original_notification_id",
            "escalation_level",
            name="uq_escalations_notification_level",
        ),
        CheckConstraint(
            "escalation_level BETWEEN 1 AND 5",
            name="ck_escalations_level_range",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    original_notification_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("notifications.id"),
        nullable=False,
        index=True,
    )
    recipient_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    escalation_level: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    escalated_to: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Relationships
    notification: Mapped["NotificationModel"] = relationship(
        "NotificationModel", back_populates="escalations"
    )
