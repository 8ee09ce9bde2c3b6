"""Escalation chain management."""

from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID

import structlog

from core.clock import Clock, utcnow
from core.exceptions import (
    AppException,
    EscalationLevelConflictError,
    EscalationNotFoundError,
    InvalidEscalationLevelError,
    NotificationNotFoundError,
    ValidationError,
)
from core.locks import KeyedLock
from core.result import BatchResult
from domain.entities.escalation import MAX_ESCALATION_LEVEL, Escalation
from domain.entities.notification import Notification
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.transaction import bounded_uow

logger = structlog.get_logger()

DEFAULT_ACK_TIMEOUT_MINUTES = 15
SWEEP_BATCH_SIZE = 500


def notification_lock_key(notification_id: UUID) -> tuple[str, UUID]:
    return ("notification", notification_id)


class EscalationService:
    """Creates, resolves and sweeps escalation chains.

    A chain is keyed by the original notification. Levels are strictly
    increasing and capped at ``MAX_ESCALATION_LEVEL``. Acknowledging the
    original notification resolves the whole chain.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        locks: KeyedLock | None = None,
        clock: Clock = utcnow,
        store_timeout: float | None = None,
        ack_timeout_minutes: int = DEFAULT_ACK_TIMEOUT_MINUTES,
        sweep_priorities: list[str] | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks or KeyedLock()
        self._clock = clock
        self._store_timeout = store_timeout
        self._ack_timeout = timedelta(minutes=ack_timeout_minutes)
        self._sweep_priorities = sweep_priorities or ["critical"]

    # --- In-transaction chain resolution ---

    async def resolve_chain_in(
        self, uow: IUnitOfWork, notification_id: UUID, resolved_at: datetime
    ) -> int:
        """Resolve every open escalation of a chain inside the caller's transaction.

        Called by NotificationService.acknowledge(); the caller commits.
        """
        count = await uow.escalations.resolve_open(notification_id, resolved_at)
        if count:
            logger.info(
                "escalation_chain_resolved",
                notification_id=str(notification_id),
                resolved_count=count,
            )
        return count

    # --- Commands ---

    async def create_escalation(
        self,
        original_notification_id: UUID,
        recipient_id: UUID,
        level: int,
        reason: str,
        escalated_to: str | None = None,
    ) -> Escalation:
        """Record a new escalation level for a notification.

        Raises:
            InvalidEscalationLevelError: level outside ``[1, 5]``.
            ValidationError: blank reason.
            NotificationNotFoundError: unknown original notification.
            EscalationLevelConflictError: level not above the chain's current level.
        """
        if isinstance(level, bool) or not isinstance(level, int):
            raise ValidationError("Escalation level must be an integer", field="level")
        # Out-of-range levels are a validation failure; conflict is reserved for
        # in-range levels that do not climb the chain.
        if level < 1 or level > MAX_ESCALATION_LEVEL:
            raise InvalidEscalationLevelError(level, MAX_ESCALATION_LEVEL)
        if not reason or not reason.strip():
            raise ValidationError("Escalation reason is required", field="reason")

        async with self._locks.hold(notification_lock_key(original_notification_id)):
            async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
                notification = await uow.notifications.get(original_notification_id)
                if notification is None:
                    raise NotificationNotFoundError(str(original_notification_id))

                current_level = await uow.escalations.get_max_level(original_notification_id)
                if level <= current_level:
                    raise EscalationLevelConflictError(
                        str(original_notification_id), level, current_level
                    )

                now = self._clock()
                escalation = Escalation(
                    original_notification_id=original_notification_id,
                    recipient_id=recipient_id,
                    escalation_level=level,
                    reason=reason.strip(),
                    escalated_to=escalated_to,
                    created_at=now,
                )
                # Late escalations on an acknowledged notification are kept for
                # audit but never open a live chain.
                if notification.is_acknowledged:
                    escalation.resolved_at = now

                created = await uow.escalations.create(escalation)
                await uow.commit()

        logger.info(
            "escalation_created",
            escalation_id=str(created.id),
            notification_id=str(original_notification_id),
            level=level,
            auto_resolved=created.is_resolved,
        )
        return created

    async def resolve(self, original_notification_id: UUID) -> int:
        """Resolve the open escalations of a notification's chain."""
        async with self._locks.hold(notification_lock_key(original_notification_id)):
            async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
                notification = await uow.notifications.get(original_notification_id)
                if notification is None:
                    raise NotificationNotFoundError(str(original_notification_id))
                count = await self.resolve_chain_in(uow, original_notification_id, self._clock())
                await uow.commit()
                return count

    async def resolve_escalation(self, escalation_id: UUID) -> Escalation:
        """Explicitly resolve an escalation, halting its whole chain."""
        async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
            escalation = await uow.escalations.get(escalation_id)
        if escalation is None:
            raise EscalationNotFoundError(str(escalation_id))

        notification_id = escalation.original_notification_id
        async with self._locks.hold(notification_lock_key(notification_id)):
            async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
                await self.resolve_chain_in(uow, notification_id, self._clock())
                await uow.commit()
                resolved = await uow.escalations.get(escalation_id)

        if resolved is None:
            raise EscalationNotFoundError(str(escalation_id))
        return resolved

    # --- Queries ---

    async def list_escalations(self, original_notification_id: UUID) -> list[Escalation]:
        """The chain of a notification, ordered by level."""
        async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
            notification = await uow.notifications.get(original_notification_id)
            if notification is None:
                raise NotificationNotFoundError(str(original_notification_id))
            return await uow.escalations.list_for_notification(original_notification_id)

    # --- Sweep ---

    async def escalate_overdue(self, now: datetime | None = None) -> BatchResult:
        """Raise every overdue, unacknowledged notification one level.

        Each notification is handled in its own transaction; a failure on
        one item is recorded and the sweep moves on.
        """
        now = now or self._clock()
        cutoff = now - self._ack_timeout
        result = BatchResult()

        async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
            candidates = await uow.notifications.list_escalation_candidates(
                priorities=self._sweep_priorities,
                created_before=cutoff,
                limit=SWEEP_BATCH_SIZE,
            )

        for notification in candidates:
            try:
                escalation = await self._escalate_one(notification, now, cutoff)
            except AppException as exc:
                logger.warning(
                    "escalation_sweep_item_failed",
                    notification_id=str(notification.id),
                    error_code=exc.error_code.value,
                    message=exc.message,
                )
                result.record_failure(str(notification.id), exc.error_code.value, exc.message)
                continue
            if escalation is None:
                result.record_skip()
            else:
                result.record_success()

        logger.info(
            "escalation_sweep_completed",
            checked=result.total,
            escalated=result.succeeded,
            skipped=result.skipped,
            failed=result.failed,
        )
        return result

    async def _escalate_one(
        self, candidate: Notification, now: datetime, cutoff: datetime
    ) -> Escalation | None:
        async with self._locks.hold(notification_lock_key(candidate.id)):
            async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
                notification = await uow.notifications.get(candidate.id)
                if notification is None or notification.is_acknowledged:
                    return None

                chain = await uow.escalations.list_for_notification(candidate.id)
                if chain:
                    latest = chain[-1]
                    if latest.is_resolved:
                        return None
                    if latest.escalation_level >= MAX_ESCALATION_LEVEL:
                        return None
                    if latest.created_at > cutoff:
                        return None
                    level = latest.escalation_level + 1
                else:
                    level = 1

                minutes = int(self._ack_timeout.total_seconds() // 60)
                escalation = Escalation(
                    original_notification_id=notification.id,
                    recipient_id=notification.recipient_id,
                    escalation_level=level,
                    reason=(
                        f"{notification.priority.value.capitalize()} notification "
                        f"unacknowledged for {minutes} minutes"
                    ),
                    created_at=now,
                )
                created = await uow.escalations.create(escalation)
                await uow.commit()

        logger.info(
            "escalation_created",
            escalation_id=str(created.id),
            notification_id=str(candidate.id),
            level=level,
            source="sweep",
        )
        return created
