"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

# Disable rate limiting and the background sweep in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ESCALATION_SWEEP_INTERVAL_SECONDS"] = "0"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.services.engine import NotificationEngine
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Wednesday, well clear of any weekend or midnight edge
START_TIME = datetime(2026, 3, 4, 12, 0, 0)


class FakeClock:
    """Settable clock returning naive UTC datetimes."""

    def __init__(self, now: datetime = START_TIME) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """A clock frozen at a fixed Wednesday noon UTC."""
    return FakeClock()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def notification_engine(
    session_factory: async_sessionmaker[AsyncSession], clock: FakeClock
) -> NotificationEngine:
    """Fully wired engine over the test database."""
    from api.v1.dependencies import build_engine

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return build_engine(test_uow_factory, clock=clock)


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with no database overrides."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def api_client(
    notification_engine: NotificationEngine,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create test client backed by the in-memory database.

    The engine dependency is overridden so every service shares the test
    database and the fake clock.
    """
    from api.v1.dependencies import get_notification_engine
    from main import create_app

    app = create_app()
    app.dependency_overrides[get_notification_engine] = lambda: notification_engine

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
