"""Upload API route."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, UploadFile, File as FastAPIFile
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.database import get_db
from dashboard.dependencies import get_current_user, get_storage
from dashboard.exceptions import BadRequestError
from dashboard.models.user import User
from dashboard.schemas.file import FileResponse, UploadResponse
from dashboard.services.file_storage import StorageBackend
from dashboard.services.upload_service import store_upload
from dashboard.services.upload_validator import MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["files"])


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = FastAPIFile(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    """Upload one file (multipart field ``file``) for the caller."""
    if file is None or not file.filename:
        raise BadRequestError("No file provided", code="NO_FILE")

    # One byte past the limit is enough to reject an oversized upload
    contents = await file.read(MAX_UPLOAD_BYTES + 1)
    logger.info(
        f"Upload from user {user.id}: {file.filename} "
        f"({len(contents)} bytes, {file.content_type})"
    )
    record = await store_upload(
        db, storage, user.id,
        original_name=file.filename,
        content_type=file.content_type,
        content=contents,
    )
    return UploadResponse(file=FileResponse.model_validate(record))
