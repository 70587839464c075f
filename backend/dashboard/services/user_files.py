"""Owner-scoped file listing, lookup, and deletion."""
import logging
import uuid

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.exceptions import DatabaseFailedError, NotFoundError
from dashboard.models.file_record import FileRecord
from dashboard.services.file_storage import StorageBackend

logger = logging.getLogger(__name__)


async def list_user_files(db: AsyncSession, user_id: uuid.UUID) -> list[FileRecord]:
    """All of a user's files, newest first."""
    result = await db.execute(
        select(FileRecord)
        .where(FileRecord.user_id == user_id)
        .order_by(desc(FileRecord.uploaded_at))
    )
    return list(result.scalars().all())


async def get_user_file(db: AsyncSession, user_id: uuid.UUID, file_id: str) -> FileRecord:
    """Look up a file by id AND owner.

    Unknown ids, malformed ids and other users' files all raise the same
    NotFoundError so callers cannot probe for existence.
    """
    try:
        parsed_id = uuid.UUID(str(file_id))
    except ValueError:
        raise NotFoundError("File not found")

    result = await db.execute(
        select(FileRecord).where(FileRecord.id == parsed_id, FileRecord.user_id == user_id)
    )
    file_rec = result.scalar_one_or_none()
    if not file_rec:
        raise NotFoundError("File not found")
    return file_rec


async def delete_user_file(
    db: AsyncSession,
    storage: StorageBackend,
    user_id: uuid.UUID,
    file_id: str,
) -> bool:
    """Delete a file's stored object and its metadata row.

    The row is removed even when the storage delete fails; the object is
    then orphaned and logged as such. Returns whether the object delete
    succeeded.
    """
    file_rec = await get_user_file(db, user_id, file_id)
    owner = str(file_rec.user_id)

    object_deleted = True
    try:
        await storage.delete(owner, file_rec.name)
    except Exception as e:
        object_deleted = False
        logger.warning(
            f"Could not delete {owner}/{file_rec.name} from {storage.name}, "
            f"removing record {file_rec.id} anyway (orphaned object): {e}"
        )

    try:
        await db.delete(file_rec)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Failed to delete file record {file_rec.id} for user {owner}: {e}")
        await db.rollback()
        raise DatabaseFailedError("Failed to delete file record. Please try again.") from e
    logger.info(f"Deleted file record {file_rec.id} for user {owner}")
    return object_deleted
