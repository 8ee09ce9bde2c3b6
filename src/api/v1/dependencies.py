"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from fastapi import Depends

from core.clock import Clock, utcnow
from core.config import Settings, settings
from core.locks import KeyedLock
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.digest_service import DigestService
from domain.services.engine import NotificationEngine
from domain.services.escalation_service import EscalationService
from domain.services.notification_service import NotificationService
from domain.services.preference_resolver import PreferenceResolver
from domain.services.preference_service import PreferenceService
from domain.services.stats_service import StatsService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


def build_engine(
    uow_factory: Callable[[], IUnitOfWork],
    config: Settings = settings,
    clock: Clock = utcnow,
) -> NotificationEngine:
    """Wire the services around one shared lock registry."""
    locks = KeyedLock()
    timeout = config.store_timeout_seconds
    escalations = EscalationService(
        uow_factory,
        locks=locks,
        clock=clock,
        store_timeout=timeout,
        ack_timeout_minutes=config.escalation_ack_timeout_minutes,
        sweep_priorities=config.escalation_priority_list,
    )
    return NotificationEngine(
        notifications=NotificationService(
            uow_factory,
            escalation_service=escalations,
            resolver=PreferenceResolver(),
            locks=locks,
            clock=clock,
            store_timeout=timeout,
            max_page_size=config.max_page_size,
        ),
        escalations=escalations,
        preferences=PreferenceService(
            uow_factory, locks=locks, clock=clock, store_timeout=timeout
        ),
        digests=DigestService(uow_factory, clock=clock, store_timeout=timeout),
        stats=StatsService(uow_factory, store_timeout=timeout),
    )


@lru_cache
def get_notification_engine() -> NotificationEngine:
    """Get the process-wide NotificationEngine."""
    return build_engine(get_uow_factory())


def get_notification_service(
    engine: NotificationEngine = Depends(get_notification_engine),
) -> NotificationService:
    """Get Notification service instance."""
    return engine.notifications


def get_escalation_service(
    engine: NotificationEngine = Depends(get_notification_engine),
) -> EscalationService:
    """Get Escalation service instance."""
    return engine.escalations


def get_preference_service(
    engine: NotificationEngine = Depends(get_notification_engine),
) -> PreferenceService:
    """Get Preference service instance."""
    return engine.preferences


def get_digest_service(
    engine: NotificationEngine = Depends(get_notification_engine),
) -> DigestService:
    """Get Digest service instance."""
    return engine.digests


def get_stats_service(
    engine: NotificationEngine = Depends(get_notification_engine),
) -> StatsService:
    """Get Stats service instance."""
    return engine.stats
