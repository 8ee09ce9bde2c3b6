"""Main FastAPI application entry point."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from api.v1.dependencies import get_notification_engine
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.database.session import dispose_engine

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


async def escalation_sweep_loop(interval_seconds: int) -> None:
    """Periodically escalate critical notifications left unacknowledged."""
    while True:
        await asyncio.sleep(interval_seconds)
        result = await get_notification_engine().escalate_overdue()
        if not result.ok:
            logger.error(
                "escalation_sweep_failed",
                error_code=result.error_code,
                message=result.message,
            )
        elif result.data is not None and result.data.succeeded > 0:
            logger.info("escalation_sweep_escalated", escalated=result.data.succeeded)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the escalation sweep; stop it and release the pool on shutdown."""
    sweep_task: asyncio.Task[None] | None = None
    if settings.escalation_sweep_interval_seconds > 0:
        sweep_task = asyncio.create_task(
            escalation_sweep_loop(settings.escalation_sweep_interval_seconds)
        )
        logger.info(
            "escalation_sweep_started",
            interval_seconds=settings.escalation_sweep_interval_seconds,
        )
    yield
    if sweep_task is not None:
        sweep_task.cancel()
        with suppress(asyncio.CancelledError):
            await sweep_task
        logger.info("escalation_sweep_stopped")
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Notification & Escalation Engine\n\n"
            "Stores notifications, decides per recipient which channels fire "
            "now, later or never, escalates critical alerts that go "
            "unacknowledged and builds periodic digests.\n\n"
            "### Features\n"
            "- **Preferences**: Quiet hours, frequency, weekend and priority-floor rules\n"
            "- **Lifecycle**: Unread, read and acknowledged, each transition idempotent\n"
            "- **Escalations**: Strictly increasing levels 1-5, resolved on acknowledgement\n"
            "- **Digests**: Half-open windows, rebuilt identically on retry\n\n"
            "### Errors\n"
            "Failures return `error_code`, `error_kind` (validation, not_found, "
            "conflict or internal), `message` and `details`.\n\n"
            "### Rate Limits\n"
            "Recipient-scoped endpoints are limited per recipient; others per client."
        ),
        version="1.0.0",
        debug=settings.debug,
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "notifications",
                "description": "Notification creation, listing and state transitions",
            },
            {
                "name": "escalations",
                "description": "Escalation chains for unacknowledged notifications",
            },
            {
                "name": "digests",
                "description": "Windowed notification digests",
            },
            {
                "name": "preferences",
                "description": "Per-recipient delivery preferences",
            },
            {
                "name": "stats",
                "description": "Notification statistics",
            },
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
