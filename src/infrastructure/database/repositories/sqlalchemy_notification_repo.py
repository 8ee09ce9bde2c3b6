"""SQLAlchemy implementation of Notification repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.escalation import MAX_ESCALATION_LEVEL
from domain.entities.notification import (
    DeliveryChannel,
    Notification,
    NotificationCategory,
    NotificationFilter,
    NotificationPriority,
)
from infrastructure.database.models import EscalationModel, NotificationModel


class SQLAlchemyNotificationRepository:
    """SQLAlchemy implementation of INotificationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, notification: Notification) -> Notification:
        """Persist a new notification."""
        model = self._to_model(notification)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get(self, notification_id: UUID) -> Notification | None:
        """Get a notification by ID."""
        stmt = select(NotificationModel).where(NotificationModel.id == notification_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def save_state(self, notification: Notification) -> Notification:
        """Persist read/acknowledge timestamps. Timestamps are only ever set, never cleared."""
        model = await self._session.get(NotificationModel, notification.id)
        if model is None:
            return notification
        if model.read_at is None:
            model.read_at = notification.read_at
        if model.acknowledged_at is None:
            model.acknowledged_at = notification.acknowledged_at
        await self._session.flush()
        return self._to_entity(model)

    async def list_for_recipient(
        self, recipient_id: UUID, filter: NotificationFilter
    ) -> list[Notification]:
        """List a recipient's notifications matching the filter."""
        stmt = select(NotificationModel).where(NotificationModel.recipient_id == recipient_id)

        if filter.categories:
            stmt = stmt.where(
                NotificationModel.category.in_([c.value for c in filter.categories])
            )

        if filter.priorities:
            stmt = stmt.where(
                NotificationModel.priority.in_([p.value for p in filter.priorities])
            )

        if filter.is_read is True:
            stmt = stmt.where(NotificationModel.read_at.is_not(None))
        elif filter.is_read is False:
            stmt = stmt.where(NotificationModel.read_at.is_(None))

        if filter.is_acknowledged is True:
            stmt = stmt.where(NotificationModel.acknowledged_at.is_not(None))
        elif filter.is_acknowledged is False:
            stmt = stmt.where(NotificationModel.acknowledged_at.is_(None))

        if filter.created_from is not None:
            stmt = stmt.where(NotificationModel.created_at >= filter.created_from)

        if filter.created_to is not None:
            stmt = stmt.where(NotificationModel.created_at <= filter.created_to)

        if filter.entity_type:
            stmt = stmt.where(NotificationModel.entity_type == filter.entity_type)

        if filter.newest_first:
            stmt = stmt.order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        else:
            stmt = stmt.order_by(NotificationModel.created_at.asc(), NotificationModel.id.asc())

        stmt = stmt.offset(filter.offset).limit(filter.limit)

        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars()]

    async def list_in_window(
        self, recipient_id: UUID, start: datetime, end: datetime
    ) -> list[Notification]:
        """Notifications with ``start <= created_at < end``, oldest first."""
        stmt = (
            select(NotificationModel)
            .where(
                NotificationModel.recipient_id == recipient_id,
                NotificationModel.created_at >= start,
                NotificationModel.created_at < end,
            )
            .order_by(NotificationModel.created_at.asc(), NotificationModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars()]

    async def mark_all_read(self, recipient_id: UUID, read_at: datetime) -> int:
        """Mark every unread notification read. Returns count updated."""
        stmt = (
            update(NotificationModel)
            .where(
                NotificationModel.recipient_id == recipient_id,
                NotificationModel.read_at.is_(None),
            )
            .values(read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    async def count_by_state(
        self, recipient_id: UUID
    ) -> list[tuple[str, str, bool, bool, int]]:
        """Counts grouped by (category, priority, is_read, is_acknowledged)."""
        is_read = NotificationModel.read_at.is_not(None).label("is_read")
        is_acknowledged = NotificationModel.acknowledged_at.is_not(None).label("is_acknowledged")
        stmt = (
            select(
                NotificationModel.category,
                NotificationModel.priority,
                is_read,
                is_acknowledged,
                func.count(NotificationModel.id),
            )
            .where(NotificationModel.recipient_id == recipient_id)
            .group_by(
                NotificationModel.category,
                NotificationModel.priority,
                is_read,
                is_acknowledged,
            )
        )
        result = await self._session.execute(stmt)
        return [
            (category, priority, bool(read), bool(acked), int(count))
            for category, priority, read, acked, count in result.all()
        ]

    async def list_escalation_candidates(
        self,
        priorities: list[str],
        created_before: datetime,
        limit: int = 500,
    ) -> list[Notification]:
        """Unacknowledged, escalation-eligible notifications older than a cutoff.

        Chains that were resolved or already reached the top level are
        excluded here, so they never crowd newer notifications out of the batch.
        """
        resolved_chain = (
            select(EscalationModel.id)
            .where(
                EscalationModel.original_notification_id == NotificationModel.id,
                EscalationModel.resolved_at.is_not(None),
            )
            .exists()
        )
        exhausted_chain = (
            select(EscalationModel.id)
            .where(
                EscalationModel.original_notification_id == NotificationModel.id,
                EscalationModel.escalation_level >= MAX_ESCALATION_LEVEL,
            )
            .exists()
        )
        stmt = (
            select(NotificationModel)
            .where(
                NotificationModel.acknowledged_at.is_(None),
                NotificationModel.escalation_eligible.is_(True),
                NotificationModel.priority.in_(priorities),
                NotificationModel.created_at < created_before,
                ~resolved_chain,
                ~exhausted_chain,
            )
            .order_by(NotificationModel.created_at.asc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars()]

    # --- Conversion methods ---

    def _to_entity(self, model: NotificationModel) -> Notification:
        """Convert NotificationModel to domain entity."""
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            sender_id=model.sender_id,
            category=NotificationCategory(model.category),
            priority=NotificationPriority(model.priority),
            title=model.title,
            message=model.message,
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            metadata=model.metadata_ or {},
            delivery_channels=[DeliveryChannel(c) for c in model.delivery_channels or []],
            deferred_channels=[DeliveryChannel(c) for c in model.deferred_channels or []],
            deferred_until=model.deferred_until,
            include_in_digest=model.include_in_digest,
            escalation_eligible=model.escalation_eligible,
            created_at=model.created_at,
            read_at=model.read_at,
            acknowledged_at=model.acknowledged_at,
        )

    def _to_model(self, entity: Notification) -> NotificationModel:
        """Convert Notification domain entity to ORM model."""
        return NotificationModel(
            id=entity.id,
            recipient_id=entity.recipient_id,
            sender_id=entity.sender_id,
            category=entity.category.value,
            priority=entity.priority.value,
            title=entity.title,
            message=entity.message,
            entity_type=entity.entity_type,
            entity_id=entity.entity_id,
            metadata_=entity.metadata,
            delivery_channels=[c.value for c in entity.delivery_channels],
            deferred_channels=[c.value for c in entity.deferred_channels],
            deferred_until=entity.deferred_until,
            include_in_digest=entity.include_in_digest,
            escalation_eligible=entity.escalation_eligible,
            created_at=entity.created_at,
            read_at=entity.read_at,
            acknowledged_at=entity.acknowledged_at,
        )
