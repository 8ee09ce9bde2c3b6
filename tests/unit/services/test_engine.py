"""Unit tests for the NotificationEngine facade."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from core.exceptions import (
    ErrorKind,
    InvalidEscalationLevelError,
    NotificationNotFoundError,
)
from domain.services.engine import NotificationEngine


@pytest.fixture
def services() -> dict[str, AsyncMock]:
    return {
        "notifications": AsyncMock(),
        "escalations": AsyncMock(),
        "preferences": AsyncMock(),
        "digests": AsyncMock(),
        "stats": AsyncMock(),
    }


@pytest.fixture
def engine(services: dict[str, AsyncMock]) -> NotificationEngine:
    return NotificationEngine(**services)


class TestResultShape:
    """Every operation returns a Result instead of raising."""

    @pytest.mark.asyncio
    async def test_success_carries_data(
        self, engine: NotificationEngine, services: dict[str, AsyncMock], make_notification
    ) -> None:
        notification = make_notification()
        services["notifications"].mark_read.return_value = notification

        result = await engine.mark_read(notification.id)

        assert result.ok is True
        assert result.data is notification
        assert result.error_kind is None

    @pytest.mark.asyncio
    async def test_not_found_kind(
        self, engine: NotificationEngine, services: dict[str, AsyncMock]
    ) -> None:
        missing = uuid4()
        services["notifications"].acknowledge.side_effect = NotificationNotFoundError(str(missing))

        result = await engine.acknowledge(missing)

        assert result.ok is False
        assert result.data is None
        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.error_code == "NOTIFICATION_NOT_FOUND"
        assert str(missing) in (result.message or "")

    @pytest.mark.asyncio
    async def test_validation_kind(
        self, engine: NotificationEngine, services: dict[str, AsyncMock]
    ) -> None:
        services["escalations"].create_escalation.side_effect = InvalidEscalationLevelError(6, 5)

        result = await engine.create_escalation(uuid4(), uuid4(), 6, "too far")

        assert result.error_kind == ErrorKind.VALIDATION
        assert result.details == {"level": 6, "max_level": 5}

    @pytest.mark.asyncio
    async def test_unexpected_error_is_internal(
        self, engine: NotificationEngine, services: dict[str, AsyncMock]
    ) -> None:
        services["stats"].get_stats.side_effect = RuntimeError("boom")

        result = await engine.get_stats(uuid4())

        assert result.ok is False
        assert result.error_kind == ErrorKind.INTERNAL
        assert result.error_code == "INTERNAL_ERROR"

    @pytest.mark.asyncio
    async def test_create_notification_forwards_arguments(
        self, engine: NotificationEngine, services: dict[str, AsyncMock]
    ) -> None:
        recipient_id = uuid4()

        await engine.create_notification(
            recipient_id, "Title", "Body", "system", priority="low", metadata={"k": "v"}
        )

        kwargs = services["notifications"].create_notification.await_args.kwargs
        assert kwargs["recipient_id"] == recipient_id
        assert kwargs["priority"] == "low"
        assert kwargs["metadata"] == {"k": "v"}
