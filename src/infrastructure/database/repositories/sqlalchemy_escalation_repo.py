"""SQLAlchemy implementation of Escalation repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import EscalationLevelConflictError
from domain.entities.escalation import Escalation
from infrastructure.database.models import EscalationModel


class SQLAlchemyEscalationRepository:
    """SQLAlchemy implementation of IEscalationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, escalation: Escalation) -> Escalation:
        """Persist a new escalation.

        A concurrent writer that claimed the same level first trips the
        unique constraint; that surfaces as a level conflict.
        """
        model = self._to_model(escalation)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError:
            await self._session.rollback()
            current = await self.get_max_level(escalation.original_notification_id)
            raise EscalationLevelConflictError(
                str(escalation.original_notification_id),
                escalation.escalation_level,
                current,
            ) from None
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get(self, escalation_id: UUID) -> Escalation | None:
        """Get an escalation by ID."""
        stmt = select(EscalationModel).where(EscalationModel.id == escalation_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_for_notification(self, notification_id: UUID) -> list[Escalation]:
        """The escalation chain of a notification, ordered by level."""
        stmt = (
            select(EscalationModel)
            .where(EscalationModel.original_notification_id == notification_id)
            .order_by(EscalationModel.escalation_level.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars()]

    async def get_max_level(self, notification_id: UUID) -> int:
        """Highest existing level for a notification (0 if none)."""
        stmt = select(func.coalesce(func.max(EscalationModel.escalation_level), 0)).where(
            EscalationModel.original_notification_id == notification_id
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def resolve_open(self, notification_id: UUID, resolved_at: datetime) -> int:
        """Resolve every unresolved escalation of a chain. Returns count updated."""
        stmt = (
            update(EscalationModel)
            .where(
                EscalationModel.original_notification_id == notification_id,
                EscalationModel.resolved_at.is_(None),
            )
            .values(resolved_at=resolved_at)
            .execution_options(synchronize_session="fetch")
        )
        result = await self._session.execute(stmt)
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    # --- Conversion methods ---

    def _to_entity(self, model: EscalationModel) -> Escalation:
        """Convert EscalationModel to domain entity."""
        return Escalation(
            id=model.id,
            original_notification_id=model.original_notification_id,
            recipient_id=model.recipient_id,
            escalation_level=model.escalation_level,
            reason=model.reason,
            escalated_to=model.escalated_to,
            created_at=model.created_at,
            resolved_at=model.resolved_at,
        )

    def _to_model(self, entity: Escalation) -> EscalationModel:
        """Convert Escalation domain entity to ORM model."""
        return EscalationModel(
            id=entity.id,
            original_notification_id=entity.original_notification_id,
            recipient_id=entity.recipient_id,
            escalation_level=entity.escalation_level,
            reason=entity.reason,
            escalated_to=entity.escalated_to,
            created_at=entity.created_at,
            resolved_at=entity.resolved_at,
        )
