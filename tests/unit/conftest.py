"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from core.locks import KeyedLock
from domain.entities.notification import Notification, NotificationCategory, NotificationPriority


class FakeUnitOfWork:
    """Fake Unit of Work with repository mocks for unit testing."""

    def __init__(self) -> None:
        self.notifications = AsyncMock()
        self.preferences = AsyncMock()
        self.escalations = AsyncMock()
        self.committed = False
        self.rolled_back = False

        # Repositories hand back what they were given
        self.notifications.create.side_effect = lambda n: n
        self.notifications.save_state.side_effect = lambda n: n
        self.preferences.save.side_effect = lambda p: p
        self.escalations.create.side_effect = lambda e: e
        self.preferences.get.return_value = None
        self.escalations.get_max_level.return_value = 0
        self.escalations.resolve_open.return_value = 0

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, exc_type: Any, *args: Any) -> None:
        if exc_type:
            await self.rollback()


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def locks() -> KeyedLock:
    return KeyedLock()


@pytest.fixture
def recipient_id() -> UUID:
    """A random recipient ID."""
    return uuid4()


def _make_notification(
    recipient_id: UUID | None = None,
    category: NotificationCategory = NotificationCategory.SCHEDULE,
    priority: NotificationPriority = NotificationPriority.NORMAL,
    **kwargs: Any,
) -> Notification:
    """Build a Notification with sensible defaults."""
    return Notification(
        recipient_id=recipient_id or uuid4(),
        category=category,
        priority=priority,
        title=kwargs.pop("title", "Shift changed"),
        message=kwargs.pop("message", "Your shift now starts at 07:00"),
        **kwargs,
    )


@pytest.fixture
def make_notification() -> Any:
    """Factory for Notification entities."""
    return _make_notification
