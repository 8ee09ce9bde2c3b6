"""Integration tests for Preferences API endpoints."""

from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient


@pytest.fixture
def recipient_id() -> UUID:
    return uuid4()


def _url(recipient_id: UUID) -> str:
    return f"/api/v1/recipients/{recipient_id}/preferences"


class TestGetPreferences:
    """Tests for GET /api/v1/recipients/{recipient_id}/preferences."""

    @pytest.mark.asyncio
    async def test_defaults_created_on_first_access(
        self, api_client: AsyncClient, recipient_id: UUID
    ) -> None:
        response = await api_client.get(_url(recipient_id))

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["recipient_id"] == str(recipient_id)
        assert data["notification_frequency"] == "immediate"
        assert data["email_digest_enabled"] is True
        assert data["email_digest_frequency"] == "daily"
        assert data["minimum_priority"] == "low"
        assert data["quiet_hours_start"] is None
        assert data["timezone"] == "UTC"
        assert data["channels"]["emergency"] == {"in_app": True, "email": True, "sms": True}
        assert data["channels"]["schedule"]["sms"] is False

    @pytest.mark.asyncio
    async def test_repeated_reads_return_same_record(
        self, api_client: AsyncClient, recipient_id: UUID
    ) -> None:
        first = await api_client.get(_url(recipient_id))
        second = await api_client.get(_url(recipient_id))

        assert first.json()["data"]["id"] == second.json()["data"]["id"]


class TestUpdatePreferences:
    """Tests for PATCH /api/v1/recipients/{recipient_id}/preferences."""

    @pytest.mark.asyncio
    async def test_partial_update(self, api_client: AsyncClient, recipient_id: UUID) -> None:
        await api_client.get(_url(recipient_id))

        response = await api_client.patch(
            _url(recipient_id),
            json={
                "quiet_hours_start": "22:00",
                "quiet_hours_end": "6:30",
                "timezone": "Europe/Berlin",
                "channels": {"schedule": {"sms": True}},
            },
        )

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["quiet_hours_start"] == "22:00"
        assert data["quiet_hours_end"] == "06:30"
        assert data["timezone"] == "Europe/Berlin"
        assert data["channels"]["schedule"] == {"in_app": True, "email": True, "sms": True}
        assert data["notification_frequency"] == "immediate"

    @pytest.mark.asyncio
    async def test_unknown_fields_ignored(
        self, api_client: AsyncClient, recipient_id: UUID
    ) -> None:
        response = await api_client.patch(
            _url(recipient_id), json={"favourite_colour": "teal", "minimum_priority": "high"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["minimum_priority"] == "high"
        assert "favourite_colour" not in response.json()["data"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"quiet_hours_start": "25:00", "quiet_hours_end": "06:00"},
            {"quiet_hours_start": "22:00"},
            {"quiet_hours_start": "08:00", "quiet_hours_end": "08:00"},
            {"timezone": "Mars/Olympus_Mons"},
            {"minimum_priority": "urgent"},
            {"notification_frequency": "sometimes"},
            {"channels": {"schedule": {"pager": True}}},
            {"channels": {"payroll": {"email": False}}},
        ],
    )
    async def test_invalid_values_rejected_without_writing(
        self, api_client: AsyncClient, recipient_id: UUID, body: dict
    ) -> None:
        before = (await api_client.get(_url(recipient_id))).json()["data"]

        response = await api_client.patch(_url(recipient_id), json=body)
        after = (await api_client.get(_url(recipient_id))).json()["data"]

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_PREFERENCE"
        assert response.json()["error_kind"] == "validation"
        assert after == before

    @pytest.mark.asyncio
    async def test_clear_quiet_hours(self, api_client: AsyncClient, recipient_id: UUID) -> None:
        await api_client.patch(
            _url(recipient_id), json={"quiet_hours_start": "22:00", "quiet_hours_end": "06:00"}
        )

        response = await api_client.patch(_url(recipient_id), json={"clear_quiet_hours": True})

        data = response.json()["data"]
        assert data["quiet_hours_start"] is None
        assert data["quiet_hours_end"] is None

    @pytest.mark.asyncio
    async def test_minimum_priority_blocks_delivery_and_escalation(
        self, api_client: AsyncClient, clock, recipient_id: UUID
    ) -> None:
        await api_client.patch(_url(recipient_id), json={"minimum_priority": "high"})

        response = await api_client.post(
            "/api/v1/notifications",
            json={
                "recipient_id": str(recipient_id),
                "title": "FYI",
                "message": "Cafeteria menu",
                "category": "system",
                "priority": "normal",
            },
        )

        data = response.json()["data"]
        assert data["delivery_channels"] == []
        assert data["escalation_eligible"] is False
        assert data["include_in_digest"] is True
