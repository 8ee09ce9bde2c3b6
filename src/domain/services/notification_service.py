"""Notification service layer: creation, state transitions and listing."""

from collections.abc import Callable
from typing import Any
from uuid import UUID

import structlog

from core.clock import Clock, as_naive_utc, utcnow
from core.exceptions import NotificationNotFoundError, ValidationError
from core.locks import KeyedLock
from domain.entities.notification import (
    Notification,
    NotificationCategory,
    NotificationFilter,
    NotificationPriority,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.escalation_service import EscalationService, notification_lock_key
from domain.services.preference_resolver import PreferenceResolver
from domain.services.transaction import bounded_uow

logger = structlog.get_logger()

MAX_PAGE_SIZE = 200


def _recipient_lock_key(recipient_id: UUID) -> tuple[str, UUID]:
    return ("recipient", recipient_id)


def _require_text(value: str | None, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    return str(value).strip()


def _parse_enum(enum_cls: Any, value: Any, field: str) -> Any:
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Invalid {field} {value!r}; expected one of {allowed}", field=field
        ) from None


class NotificationService:
    """System of record for notifications and their Unread -> Read -> Acknowledged lifecycle."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        escalation_service: EscalationService,
        resolver: PreferenceResolver | None = None,
        locks: KeyedLock | None = None,
        clock: Clock = utcnow,
        store_timeout: float | None = None,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._uow_factory = uow_factory
        self._escalations = escalation_service
        self._resolver = resolver or PreferenceResolver()
        self._locks = locks or KeyedLock()
        self._clock = clock
        self._store_timeout = store_timeout
        self._max_page_size = max_page_size

    # --- Creation ---

    async def create_notification(
        self,
        recipient_id: UUID | None,
        title: str | None,
        message: str | None,
        category: NotificationCategory | str | None,
        priority: NotificationPriority | str = NotificationPriority.NORMAL,
        entity_type: str | None = None,
        entity_id: str | None = None,
        sender_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Notification:
        """Create a notification and record the delivery decision for it.

        The in-app record is always created; the recipient's preferences
        only decide which additional channels fire now, later, or never.

        Raises:
            ValidationError: a required field is missing or an enum value is unknown.
        """
        if recipient_id is None:
            raise ValidationError("recipient_id is required", field="recipient_id")
        notification = Notification(
            recipient_id=recipient_id,
            title=_require_text(title, "title"),
            message=_require_text(message, "message"),
            category=_parse_enum(NotificationCategory, category, "category"),
            priority=_parse_enum(NotificationPriority, priority, "priority"),
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            sender_id=sender_id,
            metadata=metadata or {},
        )

        async with self._locks.hold(_recipient_lock_key(recipient_id)):
            async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
                now = self._clock()
                notification.created_at = now
                preferences = await uow.preferences.get(recipient_id)
                decision = self._resolver.resolve(notification, preferences, now)
                notification.apply_decision(decision)

                created = await uow.notifications.create(notification)
                await uow.commit()

        logger.info(
            "notification_created",
            notification_id=str(created.id),
            recipient_id=str(recipient_id),
            category=created.category.value,
            priority=created.priority.value,
            decision=decision.reason,
            immediate_channels=[c.value for c in created.delivery_channels],
        )
        if decision.deferred_until is not None:
            logger.debug(
                "delivery_deferred_quiet_hours",
                notification_id=str(created.id),
                deferred_until=decision.deferred_until.isoformat(),
            )
        return created

    # --- State transitions ---

    async def mark_read(self, notification_id: UUID) -> Notification:
        """Set read_at once. Repeated calls are no-ops."""
        async with self._locks.hold(notification_lock_key(notification_id)):
            async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
                notification = await uow.notifications.get(notification_id)
                if notification is None:
                    raise NotificationNotFoundError(str(notification_id))

                if notification.mark_read(self._clock()):
                    notification = await uow.notifications.save_state(notification)
                    await uow.commit()
                return notification

    async def acknowledge(self, notification_id: UUID) -> Notification:
        """Set acknowledged_at (and read_at if unset) once, resolving any open escalation chain.

        The state change and the chain resolution commit together.
        """
        async with self._locks.hold(notification_lock_key(notification_id)):
            async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
                notification = await uow.notifications.get(notification_id)
                if notification is None:
                    raise NotificationNotFoundError(str(notification_id))

                now = self._clock()
                changed = notification.acknowledge(now)
                if changed:
                    notification = await uow.notifications.save_state(notification)
                resolved = await self._escalations.resolve_chain_in(uow, notification_id, now)
                if changed or resolved:
                    await uow.commit()

        if changed:
            logger.info(
                "notification_acknowledged",
                notification_id=str(notification_id),
                escalations_resolved=resolved,
            )
        return notification

    async def mark_all_read(self, recipient_id: UUID) -> int:
        """Mark every unread notification of a recipient read. Returns count marked."""
        async with self._locks.hold(_recipient_lock_key(recipient_id)):
            async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
                count = await uow.notifications.mark_all_read(recipient_id, self._clock())
                await uow.commit()
        logger.info("notifications_marked_read", recipient_id=str(recipient_id), count=count)
        return count

    # --- Queries ---

    async def get_notification(self, notification_id: UUID) -> Notification:
        async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
            notification = await uow.notifications.get(notification_id)
        if notification is None:
            raise NotificationNotFoundError(str(notification_id))
        return notification

    async def list_notifications(
        self, recipient_id: UUID, filter: NotificationFilter | None = None
    ) -> list[Notification]:
        """List a recipient's notifications, newest first unless asked otherwise."""
        filter = filter or NotificationFilter()
        if filter.limit < 1:
            raise ValidationError("limit must be at least 1", field="limit")
        if filter.offset < 0:
            raise ValidationError("offset must not be negative", field="offset")
        filter.limit = min(filter.limit, self._max_page_size)
        if filter.created_from is not None:
            filter.created_from = as_naive_utc(filter.created_from)
        if filter.created_to is not None:
            filter.created_to = as_naive_utc(filter.created_to)
        if (
            filter.created_from is not None
            and filter.created_to is not None
            and filter.created_from > filter.created_to
        ):
            raise ValidationError("created_from must not be after created_to", field="created_from")

        async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
            return await uow.notifications.list_for_recipient(recipient_id, filter)
