"""Preference read/update operations."""

from collections.abc import Callable
from typing import Any
from uuid import UUID

import structlog

from core.clock import Clock, utcnow
from core.locks import KeyedLock
from domain.entities.preferences import NotificationPreferences, PreferencesPatch
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.transaction import bounded_uow

logger = structlog.get_logger()


class PreferenceService:
    """Reads and validates writes to a recipient's NotificationPreferences."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        locks: KeyedLock | None = None,
        clock: Clock = utcnow,
        store_timeout: float | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks or KeyedLock()
        self._clock = clock
        self._store_timeout = store_timeout

    async def get_preferences(self, recipient_id: UUID) -> NotificationPreferences:
        """Get preferences, creating the defaults on first access."""
        async with self._locks.hold(("preferences", recipient_id)):
            async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
                prefs = await uow.preferences.get(recipient_id)
                if prefs is not None:
                    return prefs

                now = self._clock()
                prefs = await uow.preferences.save(
                    NotificationPreferences(recipient_id=recipient_id, created_at=now, updated_at=now)
                )
                await uow.commit()

        logger.info("preferences_created", recipient_id=str(recipient_id))
        return prefs

    async def update_preferences(
        self,
        recipient_id: UUID,
        patch: PreferencesPatch | dict[str, Any],
    ) -> NotificationPreferences:
        """Apply a validated partial update.

        Unrecognised keys are ignored; recognised keys with invalid values
        raise InvalidPreferenceError and nothing is written.
        """
        if not isinstance(patch, PreferencesPatch):
            patch = PreferencesPatch.from_mapping(patch)

        async with self._locks.hold(("preferences", recipient_id)):
            async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
                now = self._clock()
                current = await uow.preferences.get(recipient_id)
                if current is None:
                    current = NotificationPreferences(
                        recipient_id=recipient_id, created_at=now, updated_at=now
                    )

                updated = patch.apply_to(current)
                updated.updated_at = now
                saved = await uow.preferences.save(updated)
                await uow.commit()

        logger.info("preferences_updated", recipient_id=str(recipient_id))
        return saved
