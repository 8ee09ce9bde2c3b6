"""SQLAlchemy implementation of NotificationPreferences repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.notification import NotificationCategory, NotificationPriority
from domain.entities.preferences import (
    CategoryChannels,
    DigestFrequency,
    NotificationFrequency,
    NotificationPreferences,
    default_channels,
)
from infrastructure.database.models import NotificationPreferencesModel


class SQLAlchemyPreferenceRepository:
    """SQLAlchemy implementation of IPreferenceRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, recipient_id: UUID) -> NotificationPreferences | None:
        """Get a recipient's preferences, if any were ever stored."""
        model = await self._get_model(recipient_id)
        return self._to_entity(model) if model else None

    async def save(self, prefs: NotificationPreferences) -> NotificationPreferences:
        """Insert or update a recipient's preferences."""
        existing = await self._get_model(prefs.recipient_id)
        if existing is None:
            model = self._to_model(prefs)
            self._session.add(model)
        else:
            model = existing
            model.channels = self._channels_to_json(prefs.channels)
            model.notification_frequency = prefs.notification_frequency.value
            model.email_digest_enabled = prefs.email_digest_enabled
            model.email_digest_frequency = prefs.email_digest_frequency.value
            model.minimum_priority = prefs.minimum_priority.value
            model.quiet_hours_start = prefs.quiet_hours_start
            model.quiet_hours_end = prefs.quiet_hours_end
            model.weekend_notifications = prefs.weekend_notifications
            model.timezone = prefs.timezone
            model.updated_at = prefs.updated_at

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def list_digest_recipients(self, frequency: DigestFrequency) -> list[UUID]:
        """Recipients with digests enabled at the given frequency."""
        stmt = (
            select(NotificationPreferencesModel.recipient_id)
            .where(
                NotificationPreferencesModel.email_digest_enabled.is_(True),
                NotificationPreferencesModel.email_digest_frequency == frequency.value,
            )
            .order_by(NotificationPreferencesModel.recipient_id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def _get_model(self, recipient_id: UUID) -> NotificationPreferencesModel | None:
        stmt = select(NotificationPreferencesModel).where(
            NotificationPreferencesModel.recipient_id == recipient_id
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    # --- Conversion methods ---

    @staticmethod
    def _channels_to_json(
        channels: dict[NotificationCategory, CategoryChannels],
    ) -> dict[str, dict[str, bool]]:
        return {
            category.value: {"in_app": c.in_app, "email": c.email, "sms": c.sms}
            for category, c in channels.items()
        }

    @staticmethod
    def _channels_from_json(
        raw: dict[str, Any] | None,
    ) -> dict[NotificationCategory, CategoryChannels]:
        channels = default_channels()
        for key, toggles in (raw or {}).items():
            try:
                category = NotificationCategory(key)
            except ValueError:
                continue
            channels[category] = CategoryChannels(
                in_app=bool(toggles.get("in_app", True)),
                email=bool(toggles.get("email", True)),
                sms=bool(toggles.get("sms", False)),
            )
        return channels

    def _to_entity(self, model: NotificationPreferencesModel) -> NotificationPreferences:
        """Convert NotificationPreferencesModel to domain entity."""
        return NotificationPreferences(
            id=model.id,
            recipient_id=model.recipient_id,
            channels=self._channels_from_json(model.channels),
            notification_frequency=NotificationFrequency(model.notification_frequency),
            email_digest_enabled=model.email_digest_enabled,
            email_digest_frequency=DigestFrequency(model.email_digest_frequency),
            minimum_priority=NotificationPriority(model.minimum_priority),
            quiet_hours_start=model.quiet_hours_start,
            quiet_hours_end=model.quiet_hours_end,
            weekend_notifications=model.weekend_notifications,
            timezone=model.timezone,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: NotificationPreferences) -> NotificationPreferencesModel:
        """Convert NotificationPreferences domain entity to ORM model."""
        return NotificationPreferencesModel(
            id=entity.id,
            recipient_id=entity.recipient_id,
            channels=self._channels_to_json(entity.channels),
            notification_frequency=entity.notification_frequency.value,
            email_digest_enabled=entity.email_digest_enabled,
            email_digest_frequency=entity.email_digest_frequency.value,
            minimum_priority=entity.minimum_priority.value,
            quiet_hours_start=entity.quiet_hours_start,
            quiet_hours_end=entity.quiet_hours_end,
            weekend_notifications=entity.weekend_notifications,
            timezone=entity.timezone,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
