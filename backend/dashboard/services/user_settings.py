"""Per-user dashboard preferences with lazily created defaults."""
import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.models.user_settings import (
    DEFAULT_DASHBOARD_LAYOUT,
    DEFAULT_NOTIFICATIONS,
    DEFAULT_THEME,
    DEFAULT_WEATHER_LOCATION,
    UserSettings,
)

logger = logging.getLogger(__name__)


def default_settings() -> dict[str, Any]:
    return {
        "theme": DEFAULT_THEME,
        "notifications": DEFAULT_NOTIFICATIONS,
        "weather_location": DEFAULT_WEATHER_LOCATION,
        "dashboard_layout": DEFAULT_DASHBOARD_LAYOUT,
    }


async def find_settings(db: AsyncSession, user_id: uuid.UUID) -> UserSettings | None:
    result = await db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
    return result.scalar_one_or_none()


async def _create_settings(
    db: AsyncSession, user_id: uuid.UUID, values: dict[str, Any]
) -> UserSettings:
    """Insert a settings row; if a concurrent request won the race, return theirs."""
    row = UserSettings(user_id=user_id, **{**default_settings(), **values})
    db.add(row)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await find_settings(db, user_id)
        if existing is None:
            raise
        return existing
    await db.refresh(row)
    logger.info(f"Created settings for user {user_id}")
    return row


async def get_or_create_settings(db: AsyncSession, user_id: uuid.UUID) -> UserSettings:
    """Return the user's settings, creating the default row on first read."""
    row = await find_settings(db, user_id)
    if row:
        return row
    return await _create_settings(db, user_id, {})


async def update_settings(
    db: AsyncSession, user_id: uuid.UUID, changes: dict[str, Any]
) -> UserSettings:
    """Partial-merge upsert. Only keys present in ``changes`` are written."""
    row = await find_settings(db, user_id)
    if row is None:
        row = await _create_settings(db, user_id, changes)
        # A concurrent creator may have inserted defaults first
        if all(getattr(row, k) == v for k, v in changes.items()):
            return row

    for key, value in changes.items():
        setattr(row, key, value)
    await db.commit()
    await db.refresh(row)
    return row
