"""Integration tests for Stats API endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient


class TestStats:
    """Tests for GET /api/v1/recipients/{recipient_id}/stats."""

    @pytest.mark.asyncio
    async def test_counts_by_state_category_and_priority(self, api_client: AsyncClient) -> None:
        recipient_id = uuid4()
        ids = []
        for category, priority in [
            ("schedule", "normal"),
            ("schedule", "high"),
            ("compliance", "critical"),
        ]:
            response = await api_client.post(
                "/api/v1/notifications",
                json={
                    "recipient_id": str(recipient_id),
                    "title": "t",
                    "message": "m",
                    "category": category,
                    "priority": priority,
                },
            )
            ids.append(response.json()["data"]["id"])
        await api_client.patch(f"/api/v1/notifications/{ids[0]}/read")
        await api_client.patch(f"/api/v1/notifications/{ids[1]}/acknowledge")

        response = await api_client.get(f"/api/v1/recipients/{recipient_id}/stats")

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["total"] == 3
        assert data["unread"] == 1
        assert data["unacknowledged"] == 2
        assert data["by_category"]["schedule"] == 2
        assert data["by_category"]["compliance"] == 1
        assert data["by_category"]["emergency"] == 0
        assert data["by_priority"] == {"low": 0, "normal": 1, "high": 1, "critical": 1}

    @pytest.mark.asyncio
    async def test_unknown_recipient_has_zero_counts(self, api_client: AsyncClient) -> None:
        response = await api_client.get(f"/api/v1/recipients/{uuid4()}/stats")

        data = response.json()["data"]
        assert data["total"] == data["unread"] == data["unacknowledged"] == 0
        assert set(data["by_category"].values()) == {0}
