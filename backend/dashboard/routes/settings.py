"""User settings API routes."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.database import get_db
from dashboard.dependencies import get_current_user
from dashboard.models.user import User
from dashboard.schemas.setting import SettingsResponse, SettingsUpdate
from dashboard.services.user_settings import get_or_create_settings, update_settings

router = APIRouter(prefix="/api/user/settings", tags=["settings"])


@router.get("", response_model=SettingsResponse)
async def get_settings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the caller's settings, creating defaults on first read."""
    row = await get_or_create_settings(db, user.id)
    return SettingsResponse.model_validate(row)


@router.patch("", response_model=SettingsResponse)
async def patch_settings(
    body: SettingsUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update settings. Only provided fields are updated."""
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    row = await update_settings(db, user.id, changes)
    return SettingsResponse.model_validate(row)
