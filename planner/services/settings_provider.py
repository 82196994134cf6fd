"""Notification settings collaborators."""

import logging
from datetime import datetime, timezone
from typing import Protocol

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from planner.db.models import NotificationSettingsRecord
from planner.schemas.notifications import NotificationSettings
from planner.services.errors import StoreWriteFailure

logger = logging.getLogger(__name__)

_SETTINGS_ROW_ID = 1


class NotificationSettingsProvider(Protocol):
    """Source of the current settings snapshot."""

    async def get(self) -> NotificationSettings: ...

    async def save(self, settings: NotificationSettings) -> NotificationSettings: ...


class StaticSettingsProvider:
    """Provider holding a snapshot in memory."""

    def __init__(self, settings: NotificationSettings | None = None):
        self._settings = settings or NotificationSettings()

    async def get(self) -> NotificationSettings:
        return self._settings

    async def save(self, settings: NotificationSettings) -> NotificationSettings:
        self._settings = settings
        return settings


class SqlSettingsProvider:
    """Provider backed by the single-row ``notification_settings`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self) -> NotificationSettings:
        """Stored settings merged over the defaults; defaults if unreadable."""
        try:
            async with self._session_factory() as session:
                record = await session.get(NotificationSettingsRecord, _SETTINGS_ROW_ID)
                if record is None:
                    return NotificationSettings()
                return NotificationSettings.model_validate(record.data)
        except (SQLAlchemyError, ValidationError):
            logger.exception("Error getting notification settings, using defaults")
            return NotificationSettings()

    async def save(self, settings: NotificationSettings) -> NotificationSettings:
        """
        Persist a new snapshot.

        Raises:
            StoreWriteFailure: If the row cannot be written.
        """
        try:
            async with self._session_factory() as session:
                await session.merge(
                    NotificationSettingsRecord(
                        id=_SETTINGS_ROW_ID,
                        data=settings.model_dump(mode="json"),
                        updated_at=datetime.now(timezone.utc),
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreWriteFailure(f"Failed to save notification settings: {e}") from e
        logger.info("Notification settings saved")
        return settings
