"""Database engine, session factory and store health probe."""

from typing import AsyncGenerator

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings

logger = structlog.get_logger()

# Connection checkout waits no longer than one unit of work may take.
engine = create_async_engine(
    settings.async_database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_timeout=settings.store_timeout_seconds,
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for request-scoped reads outside the unit of work."""
    async with async_session_factory() as session:
        yield session


async def check_store(session: AsyncSession) -> str:
    """Round-trip the notification store. Returns ``healthy`` or the failure type."""
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("store_health_check_failed", error_type=type(e).__name__)
        return f"unhealthy: {type(e).__name__}"
    return "healthy"


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    await engine.dispose()
