"""Read-only notification statistics."""

from collections.abc import Callable
from uuid import UUID

from domain.entities.notification import (
    NotificationCategory,
    NotificationPriority,
    NotificationStats,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.transaction import bounded_uow


class StatsService:
    """Counts by category, priority and read state for dashboards."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        store_timeout: float | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._store_timeout = store_timeout

    async def get_stats(self, recipient_id: UUID) -> NotificationStats:
        async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
            rows = await uow.notifications.count_by_state(recipient_id)

        by_category = {c.value: 0 for c in NotificationCategory}
        by_priority = {p.value: 0 for p in NotificationPriority}
        total = unread = unacknowledged = 0
        for category, priority, is_read, is_acknowledged, count in rows:
            total += count
            by_category[category] = by_category.get(category, 0) + count
            by_priority[priority] = by_priority.get(priority, 0) + count
            if not is_read:
                unread += count
            if not is_acknowledged:
                unacknowledged += count

        return NotificationStats(
            total=total,
            unread=unread,
            unacknowledged=unacknowledged,
            by_category=by_category,
            by_priority=by_priority,
        )
