"""File storage abstraction. Local filesystem for dev, Azure Blob for production.

The backend is chosen once at startup by ``select_storage_backend`` and
injected into handlers. Every object lives under a per-user namespace:
``<base>/<user_id>/<name>`` on disk, ``uploads/<user_id>/<name>`` in blob
storage.
"""
import logging
import os
import re
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

import aiofiles
from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobServiceClient

from dashboard.config import Settings

logger = logging.getLogger(__name__)

MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "application/pdf": "pdf",
    "text/plain": "txt",
    "text/csv": "csv",
    "application/json": "json",
}
DEFAULT_EXTENSION = "bin"

_EXTENSION_RE = re.compile(r"[a-z0-9]{1,16}")


class StorageError(Exception):
    """A storage backend failed to write, read, or delete an object."""


def resolve_extension(original_name: str, mime_type: str | None) -> str:
    """Extension from the filename suffix, else from the MIME type, else 'bin'."""
    suffix = Path(original_name or "").suffix.lstrip(".").lower()
    if suffix and _EXTENSION_RE.fullmatch(suffix):
        return suffix
    return MIME_EXTENSIONS.get(mime_type or "", DEFAULT_EXTENSION)


def generate_object_key(original_name: str, mime_type: str | None) -> str:
    """Collision-resistant object name: ``<epoch-ms>-<random>.<ext>``."""
    timestamp = int(time.time() * 1000)
    suffix = uuid.uuid4().hex[:8]
    return f"{timestamp}-{suffix}.{resolve_extension(original_name, mime_type)}"


class StorageBackend(ABC):
    """put/get/delete over a per-user object namespace."""

    name: str = "unknown"

    async def open(self) -> None:
        """Acquire resources. Called once from the app lifespan."""

    async def close(self) -> None:
        """Release resources. Called once on shutdown."""

    @abstractmethod
    async def put(self, user_id: str, name: str, data: bytes, content_type: str) -> str:
        """Store bytes. Returns the retrieval URL."""

    @abstractmethod
    async def get(self, user_id: str, name: str) -> bytes:
        """Read stored bytes."""

    @abstractmethod
    async def delete(self, user_id: str, name: str) -> None:
        """Delete a stored object."""


class LocalStorageBackend(StorageBackend):
    """Stores files under FILE_STORAGE_PATH, one directory per user."""

    name = "local"

    def __init__(self, base_path: str | Path, public_prefix: str = "/uploads"):
        self.base_path = Path(base_path)
        self.public_prefix = public_prefix.rstrip("/")

    async def open(self) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)

    def path_for(self, user_id: str, name: str) -> Path:
        return self.base_path / str(user_id) / name

    async def put(self, user_id: str, name: str, data: bytes, content_type: str) -> str:
        file_path = self.path_for(user_id, name)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise StorageError(f"Local write failed for {file_path}: {e}") from e
        return f"{self.public_prefix}/{user_id}/{name}"

    async def get(self, user_id: str, name: str) -> bytes:
        file_path = self.path_for(user_id, name)
        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageError(f"Local read failed for {file_path}: {e}") from e

    async def delete(self, user_id: str, name: str) -> None:
        file_path = self.path_for(user_id, name)
        try:
            if file_path.exists():
                os.remove(file_path)
        except OSError as e:
            raise StorageError(f"Local delete failed for {file_path}: {e}") from e


class AzureBlobStorageBackend(StorageBackend):
    """Stores files in an Azure Blob container under ``uploads/<user_id>/``."""

    name = "azure_blob"

    def __init__(self, connection_string: str, container: str):
        self._connection_string = connection_string
        self._container_name = container
        self._client: BlobServiceClient | None = None

    async def open(self) -> None:
        if self._client:
            return
        self._client = BlobServiceClient.from_connection_string(self._connection_string)
        try:
            await self._client.get_container_client(self._container_name).create_container()
            logger.info(f"Created blob container {self._container_name}")
        except ResourceExistsError:
            pass

    async def close(self) -> None:
        if self._client:
            await self._client.close()
            self._client = None

    @staticmethod
    def blob_name(user_id: str, name: str) -> str:
        return f"uploads/{user_id}/{name}"

    def _blob(self, user_id: str, name: str):
        if not self._client:
            raise StorageError("Blob storage client is not open")
        return self._client.get_blob_client(
            container=self._container_name, blob=self.blob_name(user_id, name)
        )

    async def put(self, user_id: str, name: str, data: bytes, content_type: str) -> str:
        blob = self._blob(user_id, name)
        try:
            await blob.upload_blob(
                data,
                overwrite=False,
                content_settings=ContentSettings(content_type=content_type),
            )
        except AzureError as e:
            raise StorageError(f"Blob upload failed for {blob.blob_name}: {e}") from e
        return blob.url

    async def get(self, user_id: str, name: str) -> bytes:
        blob = self._blob(user_id, name)
        try:
            downloader = await blob.download_blob()
            return await downloader.readall()
        except AzureError as e:
            raise StorageError(f"Blob download failed for {blob.blob_name}: {e}") from e

    async def delete(self, user_id: str, name: str) -> None:
        blob = self._blob(user_id, name)
        try:
            await blob.delete_blob()
        except ResourceNotFoundError:
            logger.info(f"Blob {blob.blob_name} already absent")
        except AzureError as e:
            raise StorageError(f"Blob delete failed for {blob.blob_name}: {e}") from e


def select_storage_backend(settings: Settings) -> StorageBackend:
    """Remote blob storage when its credential is configured, local disk otherwise."""
    if settings.AZURE_STORAGE_CONNECTION_STRING:
        logger.info(f"Using Azure Blob storage (container={settings.AZURE_STORAGE_CONTAINER})")
        return AzureBlobStorageBackend(
            settings.AZURE_STORAGE_CONNECTION_STRING,
            settings.AZURE_STORAGE_CONTAINER,
        )
    logger.info(f"Using local file storage at {settings.FILE_STORAGE_PATH}")
    return LocalStorageBackend(settings.FILE_STORAGE_PATH)
