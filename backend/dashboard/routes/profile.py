"""User profile routes: account details plus usage stats."""
from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.database import get_db
from dashboard.dependencies import get_current_user
from dashboard.models.file_record import FileRecord
from dashboard.models.user import User
from dashboard.schemas.auth import ProfileResponse, ProfileUpdate, UserResponse
from dashboard.schemas.setting import SettingsResponse
from dashboard.services.user_settings import find_settings

router = APIRouter(prefix="/api/user/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Profile with file count, total bytes stored, and settings (if created)."""
    result = await db.execute(
        select(func.count(FileRecord.id), func.coalesce(func.sum(FileRecord.size), 0))
        .where(FileRecord.user_id == user.id)
    )
    files_count, storage_used = result.one()
    row = await find_settings(db, user.id)

    return ProfileResponse(
        **UserResponse.model_validate(user).model_dump(),
        files_count=files_count,
        storage_used=int(storage_used),
        settings=SettingsResponse.model_validate(row) if row else None,
    )


@router.patch("", response_model=UserResponse)
async def update_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update the display name."""
    user.name = body.name
    await db.commit()
    await db.refresh(user)
    return UserResponse.model_validate(user)
