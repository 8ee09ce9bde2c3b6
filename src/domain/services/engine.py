"""In-process entry point for producers and consumers of notifications.

Every method returns a ``Result``; no exception escapes this class.
Business failures keep their error kind and code, anything unexpected is
logged and reported as an internal failure.
"""

from collections.abc import Awaitable
from datetime import datetime
from typing import Any, TypeVar
from uuid import UUID

import structlog

from core.exceptions import AppException
from core.result import BatchResult, Result
from domain.entities.digest import Digest
from domain.entities.escalation import Escalation
from domain.entities.notification import Notification, NotificationFilter, NotificationStats
from domain.entities.preferences import NotificationPreferences, PreferencesPatch
from domain.services.digest_service import DigestService
from domain.services.escalation_service import EscalationService
from domain.services.notification_service import NotificationService
from domain.services.preference_service import PreferenceService
from domain.services.stats_service import StatsService

logger = structlog.get_logger()

T = TypeVar("T")


class NotificationEngine:
    """Facade over the notification services, built once per process."""

    def __init__(
        self,
        notifications: NotificationService,
        escalations: EscalationService,
        preferences: PreferenceService,
        digests: DigestService,
        stats: StatsService,
    ) -> None:
        self.notifications = notifications
        self.escalations = escalations
        self.preferences = preferences
        self.digests = digests
        self.stats = stats

    async def _run(self, operation: str, awaitable: Awaitable[T]) -> Result[T]:
        try:
            return Result.success(await awaitable)
        except AppException as exc:
            logger.info(
                "engine_operation_failed",
                operation=operation,
                error_kind=exc.kind.value,
                error_code=exc.error_code.value,
            )
            return Result.from_exception(exc)
        except Exception as exc:
            logger.exception("engine_operation_crashed", operation=operation)
            return Result.internal(f"{operation} failed: {type(exc).__name__}")

    # --- Producer-facing ---

    async def create_notification(
        self,
        recipient_id: UUID,
        title: str,
        message: str,
        category: str,
        priority: str = "normal",
        entity_type: str | None = None,
        entity_id: str | None = None,
        sender_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Result[Notification]:
        return await self._run(
            "create_notification",
            self.notifications.create_notification(
                recipient_id=recipient_id,
                title=title,
                message=message,
                category=category,
                priority=priority,
                entity_type=entity_type,
                entity_id=entity_id,
                sender_id=sender_id,
                metadata=metadata,
            ),
        )

    async def create_escalation(
        self,
        original_notification_id: UUID,
        recipient_id: UUID,
        level: int,
        reason: str,
        escalated_to: str | None = None,
    ) -> Result[Escalation]:
        return await self._run(
            "create_escalation",
            self.escalations.create_escalation(
                original_notification_id, recipient_id, level, reason, escalated_to
            ),
        )

    async def create_digest(
        self,
        recipient_id: UUID,
        frequency: str = "daily",
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Result[Digest]:
        return await self._run(
            "create_digest",
            self.digests.build_digest(recipient_id, frequency, start, end),
        )

    async def escalate_overdue(self, now: datetime | None = None) -> Result[BatchResult]:
        return await self._run("escalate_overdue", self.escalations.escalate_overdue(now))

    # --- Consumer-facing ---

    async def list_notifications(
        self, recipient_id: UUID, filter: NotificationFilter | None = None
    ) -> Result[list[Notification]]:
        return await self._run(
            "list_notifications",
            self.notifications.list_notifications(recipient_id, filter),
        )

    async def mark_read(self, notification_id: UUID) -> Result[Notification]:
        return await self._run("mark_read", self.notifications.mark_read(notification_id))

    async def acknowledge(self, notification_id: UUID) -> Result[Notification]:
        return await self._run("acknowledge", self.notifications.acknowledge(notification_id))

    async def resolve_escalations(self, original_notification_id: UUID) -> Result[int]:
        return await self._run(
            "resolve_escalations", self.escalations.resolve(original_notification_id)
        )

    async def resolve_escalation(self, escalation_id: UUID) -> Result[Escalation]:
        return await self._run(
            "resolve_escalation", self.escalations.resolve_escalation(escalation_id)
        )

    async def get_preferences(self, recipient_id: UUID) -> Result[NotificationPreferences]:
        return await self._run("get_preferences", self.preferences.get_preferences(recipient_id))

    async def update_preferences(
        self, recipient_id: UUID, patch: PreferencesPatch | dict[str, Any]
    ) -> Result[NotificationPreferences]:
        return await self._run(
            "update_preferences",
            self.preferences.update_preferences(recipient_id, patch),
        )

    async def get_stats(self, recipient_id: UUID) -> Result[NotificationStats]:
        return await self._run("get_stats", self.stats.get_stats(recipient_id))
