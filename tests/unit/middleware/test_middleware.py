"""Unit tests for middleware."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware, resolve_request_id
from api.middleware.security import SecurityHeadersMiddleware


def _create_app_with_middleware() -> FastAPI:
    """Create a minimal FastAPI app with security and request ID middleware."""
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/test")
    async def _():
        return {"ok": True}

    return app


class TestSecurityHeadersMiddleware:
    """Tests for SecurityHeadersMiddleware."""

    @pytest.mark.asyncio
    async def test_adds_x_content_type_options(self):
        """Response includes X-Content-Type-Options: nosniff."""
        app = _create_app_with_middleware()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/test")

        assert response.headers["x-content-type-options"] == "nosniff"

    @pytest.mark.asyncio
    async def test_adds_x_frame_options(self):
        """Response includes X-Frame-Options: DENY."""
        app = _create_app_with_middleware()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/test")

        assert response.headers["x-frame-options"] == "DENY"

    @pytest.mark.asyncio
    async def test_adds_referrer_policy(self):
        """Response includes Referrer-Policy header."""
        app = _create_app_with_middleware()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/test")

        assert response.headers["referrer-policy"] == "strict-origin-when-cross-origin"

    @pytest.mark.asyncio
    async def test_disables_caching(self):
        """Notification payloads are never cached by intermediaries."""
        app = _create_app_with_middleware()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/test")

        assert response.headers["cache-control"] == "no-store"


class TestRequestIDMiddleware:
    """Tests for RequestIDMiddleware."""

    @pytest.mark.asyncio
    async def test_generates_request_id_when_not_provided(self):
        """Response includes a generated X-Request-ID header."""
        app = _create_app_with_middleware()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/test")

        assert "x-request-id" in response.headers
        assert len(response.headers["x-request-id"]) > 0

    @pytest.mark.asyncio
    async def test_propagates_existing_request_id(self):
        """Provided X-Request-ID is propagated to response."""
        app = _create_app_with_middleware()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/test", headers={"X-Request-ID": "custom-req-123"})

        assert response.headers["x-request-id"] == "custom-req-123"

    @pytest.mark.asyncio
    async def test_request_id_in_response_header(self):
        """X-Request-ID is always present in the response."""
        app = _create_app_with_middleware()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            r1 = await c.get("/test")
            r2 = await c.get("/test")

        # Both responses have request IDs
        assert "x-request-id" in r1.headers
        assert "x-request-id" in r2.headers
        # Auto-generated IDs should differ
        assert r1.headers["x-request-id"] != r2.headers["x-request-id"]

    @pytest.mark.asyncio
    async def test_malformed_request_id_replaced(self):
        """Inbound IDs that could corrupt log lines are replaced."""
        app = _create_app_with_middleware()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/test", headers={"X-Request-ID": "bad id with spaces"})

        assert response.headers["x-request-id"] != "bad id with spaces"
        assert len(response.headers["x-request-id"]) == 36


class TestRequestLoggingMiddleware:
    """Tests for RequestLoggingMiddleware."""

    @pytest.mark.asyncio
    async def test_adds_process_time_header(self):
        app = FastAPI()
        app.add_middleware(RequestLoggingMiddleware)
        app.add_middleware(RequestIDMiddleware)

        @app.get("/test")
        async def _():
            return {"ok": True}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/test")

        assert response.headers["x-process-time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_slow_requests_logged_as_warning(self):
        app = FastAPI()
        app.add_middleware(RequestLoggingMiddleware, slow_request_ms=0.000001)

        @app.get("/recipients/{recipient_id}/test")
        async def _(recipient_id: str):
            return {"ok": True}

        transport = ASGITransport(app=app)
        with patch("api.middleware.logging.logger") as mock_logger:
            async with AsyncClient(transport=transport, base_url="http://test") as c:
                await c.get("/recipients/r-1/test")

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args[0] == "request_slow"
        assert mock_logger.warning.call_args.kwargs["recipient_id"] == "r-1"


class TestResolveRequestId:
    """Tests for resolve_request_id."""

    def test_keeps_well_formed_id(self):
        assert resolve_request_id("trace-01:abc.def") == "trace-01:abc.def"

    @pytest.mark.parametrize("raw", [None, "", "x" * 129, "semi;colon"])
    def test_mints_new_id(self, raw):
        assert resolve_request_id(raw) != raw


class TestRateLimitKey:
    """Rate limits are keyed per recipient where the route names one."""

    def test_recipient_route_keys_by_recipient(self):
        from unittest.mock import MagicMock

        from core.rate_limit import recipient_or_remote_address

        request = MagicMock()
        request.path_params = {"recipient_id": "abc"}

        assert recipient_or_remote_address(request) == "recipient:abc"

    def test_other_routes_key_by_client_address(self):
        from unittest.mock import MagicMock

        from core.rate_limit import recipient_or_remote_address

        request = MagicMock()
        request.path_params = {}
        request.client.host = "10.0.0.7"

        assert recipient_or_remote_address(request) == "10.0.0.7"
