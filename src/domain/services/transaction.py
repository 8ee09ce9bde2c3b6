"""Bounded unit-of-work transactions shared by the domain services."""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import structlog

from core.exceptions import StoreUnavailableError
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


@asynccontextmanager
async def bounded_uow(
    uow_factory: Callable[[], IUnitOfWork],
    timeout: float | None,
) -> AsyncIterator[IUnitOfWork]:
    """Open a unit of work that must finish within ``timeout`` seconds.

    The unit of work rolls back on any exception, cancellation included,
    so callers only observe fully committed changes or none at all.
    """
    try:
        async with asyncio.timeout(timeout):
            async with uow_factory() as uow:
                yield uow
    except TimeoutError as exc:
        logger.error("store_timeout", timeout_seconds=timeout)
        raise StoreUnavailableError(
            f"Notification store did not respond within {timeout}s"
        ) from exc
