"""Integration tests for Escalation API endpoints."""

from typing import Any
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient


@pytest.fixture
def recipient_id() -> UUID:
    return uuid4()


async def _create_notification(
    client: AsyncClient, recipient_id: UUID, priority: str = "critical"
) -> dict[str, Any]:
    response = await client.post(
        "/api/v1/notifications",
        json={
            "recipient_id": str(recipient_id),
            "title": "Credential expired",
            "message": "ACLS certification lapsed",
            "category": "compliance",
            "priority": priority,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def _escalate(
    client: AsyncClient, notification: dict[str, Any], level: int, reason: str = "No response"
):
    return await client.post(
        "/api/v1/escalations",
        json={
            "original_notification_id": notification["id"],
            "recipient_id": notification["recipient_id"],
            "escalation_level": level,
            "reason": reason,
            "escalated_to": "charge-nurse",
        },
    )


class TestCreateEscalation:
    """Tests for POST /api/v1/escalations."""

    @pytest.mark.asyncio
    async def test_levels_must_strictly_increase(
        self, api_client: AsyncClient, recipient_id: UUID
    ) -> None:
        notification = await _create_notification(api_client, recipient_id)

        first = await _escalate(api_client, notification, 1)
        repeat = await _escalate(api_client, notification, 1)
        second = await _escalate(api_client, notification, 2)

        assert first.status_code == 201
        assert first.json()["data"]["escalation_level"] == 1
        assert first.json()["data"]["is_resolved"] is False
        assert repeat.status_code == 409
        assert repeat.json()["error_code"] == "ESCALATION_LEVEL_CONFLICT"
        assert repeat.json()["error_kind"] == "conflict"
        assert repeat.json()["details"]["current_level"] == 1
        assert second.status_code == 201

    @pytest.mark.asyncio
    @pytest.mark.parametrize("level", [0, 6, -1])
    async def test_level_out_of_range(
        self, api_client: AsyncClient, recipient_id: UUID, level: int
    ) -> None:
        notification = await _create_notification(api_client, recipient_id)

        response = await _escalate(api_client, notification, level)

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_ESCALATION_LEVEL"

    @pytest.mark.asyncio
    async def test_levels_may_skip(self, api_client: AsyncClient, recipient_id: UUID) -> None:
        notification = await _create_notification(api_client, recipient_id)

        response = await _escalate(api_client, notification, 3)
        lower = await _escalate(api_client, notification, 2)

        assert response.status_code == 201
        assert lower.status_code == 409

    @pytest.mark.asyncio
    async def test_blank_reason_rejected(
        self, api_client: AsyncClient, recipient_id: UUID
    ) -> None:
        notification = await _create_notification(api_client, recipient_id)

        response = await _escalate(api_client, notification, 1, reason="   ")

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_unknown_notification(self, api_client: AsyncClient) -> None:
        response = await _escalate(
            api_client, {"id": str(uuid4()), "recipient_id": str(uuid4())}, 1
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOTIFICATION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_after_acknowledge_is_stored_resolved(
        self, api_client: AsyncClient, recipient_id: UUID
    ) -> None:
        notification = await _create_notification(api_client, recipient_id)
        await api_client.patch(f"/api/v1/notifications/{notification['id']}/acknowledge")

        response = await _escalate(api_client, notification, 1)

        assert response.status_code == 201
        assert response.json()["data"]["is_resolved"] is True


class TestEscalationChain:
    """Chain listing and resolution."""

    @pytest.mark.asyncio
    async def test_acknowledge_resolves_chain(
        self, api_client: AsyncClient, clock, recipient_id: UUID
    ) -> None:
        notification = await _create_notification(api_client, recipient_id)
        await _escalate(api_client, notification, 1)
        await _escalate(api_client, notification, 2)
        clock.advance(minutes=3)

        await api_client.patch(f"/api/v1/notifications/{notification['id']}/acknowledge")
        response = await api_client.get(
            f"/api/v1/notifications/{notification['id']}/escalations"
        )

        body = response.json()
        assert body["meta"] == {"total": 2, "current_level": 2}
        assert [e["escalation_level"] for e in body["data"]] == [1, 2]
        assert {e["resolved_at"] for e in body["data"]} == {"2026-03-04T12:03:00"}

    @pytest.mark.asyncio
    async def test_resolve_endpoint_resolves_every_level(
        self, api_client: AsyncClient, recipient_id: UUID
    ) -> None:
        notification = await _create_notification(api_client, recipient_id)
        first = (await _escalate(api_client, notification, 1)).json()["data"]
        await _escalate(api_client, notification, 2)

        response = await api_client.post(f"/api/v1/escalations/{first['id']}/resolve")
        chain = await api_client.get(
            f"/api/v1/notifications/{notification['id']}/escalations"
        )

        assert response.status_code == 200
        assert response.json()["data"]["is_resolved"] is True
        assert all(e["is_resolved"] for e in chain.json()["data"])

    @pytest.mark.asyncio
    async def test_resolve_unknown_escalation(self, api_client: AsyncClient) -> None:
        response = await api_client.post(f"/api/v1/escalations/{uuid4()}/resolve")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ESCALATION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_empty_chain(self, api_client: AsyncClient, recipient_id: UUID) -> None:
        notification = await _create_notification(api_client, recipient_id)

        response = await api_client.get(
            f"/api/v1/notifications/{notification['id']}/escalations"
        )

        assert response.json() == {"data": [], "meta": {"total": 0, "current_level": 0}}


class TestEscalationSweep:
    """Tests for POST /api/v1/escalations/sweep."""

    @pytest.mark.asyncio
    async def test_sweep_raises_overdue_critical_notifications(
        self, api_client: AsyncClient, clock, recipient_id: UUID
    ) -> None:
        critical = await _create_notification(api_client, recipient_id)
        await _create_notification(api_client, recipient_id, priority="normal")
        clock.advance(minutes=20)

        response = await api_client.post("/api/v1/escalations/sweep")
        chain = await api_client.get(f"/api/v1/notifications/{critical['id']}/escalations")

        assert response.status_code == 200
        assert response.json()["data"]["succeeded"] == 1
        assert response.json()["data"]["failed"] == 0
        assert chain.json()["meta"]["current_level"] == 1
        assert chain.json()["data"][0]["reason"].startswith("Critical notification")

    @pytest.mark.asyncio
    async def test_sweep_waits_for_timeout_between_levels(
        self, api_client: AsyncClient, clock, recipient_id: UUID
    ) -> None:
        critical = await _create_notification(api_client, recipient_id)
        clock.advance(minutes=20)
        await api_client.post("/api/v1/escalations/sweep")

        clock.advance(minutes=5)
        too_soon = await api_client.post("/api/v1/escalations/sweep")
        clock.advance(minutes=15)
        due = await api_client.post("/api/v1/escalations/sweep")
        chain = await api_client.get(f"/api/v1/notifications/{critical['id']}/escalations")

        assert too_soon.json()["data"]["skipped"] == 1
        assert due.json()["data"]["succeeded"] == 1
        assert chain.json()["meta"]["current_level"] == 2

    @pytest.mark.asyncio
    async def test_sweep_ignores_acknowledged_and_resolved(
        self, api_client: AsyncClient, clock, recipient_id: UUID
    ) -> None:
        acknowledged = await _create_notification(api_client, recipient_id)
        resolved = await _create_notification(api_client, recipient_id)
        await api_client.patch(f"/api/v1/notifications/{acknowledged['id']}/acknowledge")
        escalation = (await _escalate(api_client, resolved, 1)).json()["data"]
        await api_client.post(f"/api/v1/escalations/{escalation['id']}/resolve")
        clock.advance(hours=1)

        response = await api_client.post("/api/v1/escalations/sweep")

        assert response.json()["data"]["total"] == 0
