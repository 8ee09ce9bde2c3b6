"""Unit tests for exception handlers."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.exception_handlers import setup_exception_handlers
from core.exceptions import (
    EscalationLevelConflictError,
    InvalidEscalationLevelError,
    NotificationNotFoundError,
    StoreUnavailableError,
)


def _create_test_app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


async def _get(app: FastAPI, path: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.get(path)


class TestExceptionHandlers:
    @pytest.mark.asyncio
    async def test_not_found_maps_to_404(self) -> None:
        app = _create_test_app()

        @app.get("/raise-app")
        async def _() -> None:
            raise NotificationNotFoundError("some-id")

        response = await _get(app, "/raise-app")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "NOTIFICATION_NOT_FOUND"
        assert body["error_kind"] == "not_found"
        assert "some-id" in body["message"]
        assert body["details"]["notification_id"] == "some-id"

    @pytest.mark.asyncio
    async def test_conflict_maps_to_409(self) -> None:
        app = _create_test_app()

        @app.get("/raise-conflict")
        async def _() -> None:
            raise EscalationLevelConflictError("n-1", 1, 2)

        response = await _get(app, "/raise-conflict")

        assert response.status_code == 409
        body = response.json()
        assert body["error_kind"] == "conflict"
        assert body["details"] == {
            "original_notification_id": "n-1",
            "level": 1,
            "current_level": 2,
        }

    @pytest.mark.asyncio
    async def test_invalid_level_maps_to_400(self) -> None:
        app = _create_test_app()

        @app.get("/raise-level")
        async def _() -> None:
            raise InvalidEscalationLevelError(7, 5)

        response = await _get(app, "/raise-level")

        assert response.status_code == 400
        assert response.json()["error_kind"] == "validation"

    @pytest.mark.asyncio
    async def test_store_unavailable_maps_to_503(self) -> None:
        app = _create_test_app()

        @app.get("/raise-store")
        async def _() -> None:
            raise StoreUnavailableError()

        response = await _get(app, "/raise-store")

        assert response.status_code == 503
        body = response.json()
        assert body["error_code"] == "STORE_UNAVAILABLE"
        assert body["error_kind"] == "internal"

    @pytest.mark.asyncio
    async def test_http_exception_returns_standard_format(self) -> None:
        from starlette.exceptions import HTTPException

        app = _create_test_app()

        @app.get("/raise-http")
        async def _() -> None:
            raise HTTPException(status_code=404, detail="Missing")

        response = await _get(app, "/raise-http")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "HTTP_ERROR"
        assert body["error_kind"] == "not_found"
        assert body["message"] == "Missing"

    @pytest.mark.asyncio
    async def test_validation_error_returns_field_details(self) -> None:
        from pydantic import BaseModel, Field

        app = _create_test_app()

        class Body(BaseModel):
            title: str = Field(..., min_length=1)

        @app.post("/validate")
        async def _(body: Body) -> dict[str, bool]:
            return {"ok": True}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.post("/validate", json={"title": ""})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["error_kind"] == "validation"
        assert body["details"][0]["field"] == "title"

    @pytest.mark.asyncio
    async def test_unhandled_exception_returns_500(self) -> None:
        app = _create_test_app()

        mock_request = MagicMock()
        mock_request.state.request_id = "test-req-id"

        handler = app.exception_handlers.get(Exception)
        assert handler is not None, "Global exception handler not registered"

        response = await handler(mock_request, RuntimeError("Something went wrong"))  # type: ignore[misc]

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error_code"] == "INTERNAL_ERROR"
        assert body["error_kind"] == "internal"
        assert body["details"]["request_id"] == "test-req-id"
