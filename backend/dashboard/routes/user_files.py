"""User files API routes (list, delete, download)."""
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.database import get_db
from dashboard.dependencies import get_current_user, get_storage
from dashboard.exceptions import BadRequestError, StorageFailedError
from dashboard.models.user import User
from dashboard.schemas.common import MessageResponse
from dashboard.schemas.file import FileResponse
from dashboard.services.file_storage import StorageBackend, StorageError
from dashboard.services.user_files import delete_user_file, get_user_file, list_user_files

router = APIRouter(prefix="/api/user/files", tags=["files"])


@router.get("", response_model=list[FileResponse])
async def list_files(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's files, newest first."""
    files = await list_user_files(db, user.id)
    return [FileResponse.model_validate(f) for f in files]


@router.delete("", response_model=MessageResponse)
async def delete_file(
    id: Optional[str] = Query(None, description="File ID"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    """Delete one of the caller's files and its stored object."""
    if not id:
        raise BadRequestError("File ID required", code="MISSING_ID")
    await delete_user_file(db, storage, user.id, id)
    return MessageResponse(message="File deleted successfully")


@router.get("/{file_id}/download")
async def download_file(
    file_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    """Return the stored bytes of one of the caller's files."""
    file_rec = await get_user_file(db, user.id, file_id)
    try:
        data = await storage.get(str(file_rec.user_id), file_rec.name)
    except StorageError as e:
        raise StorageFailedError("Could not read file from storage") from e

    return Response(
        content=data,
        media_type=file_rec.type or "application/octet-stream",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(file_rec.original_name)}"
        },
    )
