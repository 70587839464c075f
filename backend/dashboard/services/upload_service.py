"""Upload pipeline: validate -> store object -> persist metadata.

If the metadata insert fails after the object was written, the object is
deleted again as a compensating action. That delete is best-effort: its
outcome is logged (an orphaned object is logged at ERROR) and never
replaces the original failure.
"""
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.exceptions import DatabaseFailedError, StorageFailedError
from dashboard.models.file_record import FileRecord
from dashboard.services.file_storage import StorageBackend, generate_object_key
from dashboard.services.upload_validator import validate_upload

logger = logging.getLogger(__name__)


async def compensate_stored_object(storage: StorageBackend, user_id: str, name: str) -> bool:
    """Delete an object whose metadata row could not be written.

    Returns True if the object was removed, False if it is now orphaned.
    """
    try:
        await storage.delete(user_id, name)
    except Exception as e:
        logger.error(
            f"Compensating delete failed; orphaned object {user_id}/{name} "
            f"on {storage.name}: {e}"
        )
        return False
    logger.warning(f"Compensating delete removed object {user_id}/{name} from {storage.name}")
    return True


async def store_upload(
    db: AsyncSession,
    storage: StorageBackend,
    user_id: uuid.UUID,
    original_name: str,
    content_type: str | None,
    content: bytes,
) -> FileRecord:
    """Validate, store, and record one uploaded file for ``user_id``."""
    size = len(content)
    validate_upload(size, content_type)

    owner = str(user_id)
    name = generate_object_key(original_name, content_type)

    try:
        url = await storage.put(owner, name, content, content_type)
    except Exception as e:
        logger.error(f"Storage write failed for {owner}/{name} on {storage.name}: {e}")
        raise StorageFailedError() from e
    logger.info(f"Stored {owner}/{name} ({size} bytes) on {storage.name}")

    record = FileRecord(
        name=name,
        original_name=original_name,
        size=size,
        type=content_type,
        url=url,
        user_id=user_id,
    )
    try:
        db.add(record)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Metadata insert failed for {owner}/{name}: {e}")
        await db.rollback()
        await compensate_stored_object(storage, owner, name)
        raise DatabaseFailedError() from e

    # The row is committed from here on; the stored object must stay
    try:
        await db.refresh(record)
    except SQLAlchemyError as e:
        logger.warning(f"Could not reload file record {record.id} after insert: {e}")

    logger.info(f"File record {record.id} created for user {owner}")
    return record
