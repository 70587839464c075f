"""Tests for the upload pipeline (route and service)."""
import logging
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from dashboard.exceptions import DatabaseFailedError, FileTooLargeError, StorageFailedError
from dashboard.services.upload_service import compensate_stored_object, store_upload
from tests.conftest import MemoryStorageBackend, register_and_login, upload

MIB = 1024 * 1024


class TestUploadRoute:

    def test_upload_png_succeeds(self, client, memory_storage, auth_headers):
        content = b"\x89" * (3 * MIB)
        resp = upload(client, auth_headers, "holiday.png", content, "image/png")

        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["message"] == "File uploaded successfully"
        record = body["file"]
        assert record["type"] == "image/png"
        assert record["size"] == 3 * MIB
        assert record["originalName"] == "holiday.png"
        assert record["name"].endswith(".png")
        assert record["name"] != "holiday.png"
        assert record["uploadedAt"]
        assert len(memory_storage.objects) == 1
        (owner, name), stored = next(iter(memory_storage.objects.items()))
        assert owner == record["userId"]
        assert name == record["name"]
        assert len(stored) == record["size"]

    def test_exactly_one_record_after_upload(self, client, memory_storage, auth_headers):
        upload(client, auth_headers, "notes.txt", b"hello", "text/plain")

        files = client.get("/api/user/files", headers=auth_headers).json()
        assert len(files) == 1
        assert files[0]["size"] == 5
        assert files[0]["type"] == "text/plain"

    def test_too_large_rejected_without_side_effects(self, client, memory_storage, auth_headers):
        resp = upload(client, auth_headers, "big.png", b"0" * (6 * MIB), "image/png")

        assert resp.status_code == 400
        assert resp.json()["code"] == "FILE_TOO_LARGE"
        assert memory_storage.objects == {}
        assert client.get("/api/user/files", headers=auth_headers).json() == []

    def test_oversized_upload_is_read_only_past_the_limit(self, client, memory_storage, auth_headers):
        with patch("dashboard.routes.upload.store_upload", wraps=store_upload) as spy:
            resp = upload(client, auth_headers, "big.png", b"0" * (6 * MIB), "image/png")

        assert resp.status_code == 400
        assert resp.json()["code"] == "FILE_TOO_LARGE"
        assert len(spy.await_args.kwargs["content"]) == 5 * MIB + 1

    def test_unsupported_type_rejected_without_side_effects(self, client, memory_storage, auth_headers):
        resp = upload(client, auth_headers, "archive.zip", b"0" * 1024, "application/zip")

        assert resp.status_code == 400
        assert resp.json()["code"] == "UNSUPPORTED_TYPE"
        assert memory_storage.objects == {}
        assert client.get("/api/user/files", headers=auth_headers).json() == []

    def test_missing_file_is_bad_request(self, client, memory_storage, auth_headers):
        resp = client.post("/api/upload", data={"other": "x"}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "NO_FILE"

    def test_unauthenticated_rejected(self, client, memory_storage):
        resp = upload(client, {}, "a.png", b"x", "image/png")
        assert resp.status_code == 401
        assert memory_storage.objects == {}

    def test_invalid_token_rejected(self, client, memory_storage):
        resp = upload(client, {"Authorization": "Bearer not-a-token"}, "a.png", b"x", "image/png")
        assert resp.status_code == 401

    def test_storage_failure_returns_500(self, client, memory_storage, auth_headers):
        memory_storage.fail_put = True
        resp = upload(client, auth_headers)

        assert resp.status_code == 500
        assert resp.json()["code"] == "STORAGE_FAILED"
        assert client.get("/api/user/files", headers=auth_headers).json() == []

    def test_local_backend_writes_under_user_directory(self, client):
        headers = register_and_login(client)
        resp = upload(client, headers, "data.csv", b"a,b\n1,2\n", "text/csv")

        assert resp.status_code == 200
        record = resp.json()["file"]
        assert record["url"] == f"/uploads/{record['userId']}/{record['name']}"
        storage = client.app.state.storage
        assert storage.path_for(record["userId"], record["name"]).read_bytes() == b"a,b\n1,2\n"


def _failing_session():
    db = AsyncMock()
    db.add = MagicMock()
    db.commit.side_effect = SQLAlchemyError("database is down")
    return db


class TestStoreUploadService:

    @pytest.mark.asyncio
    async def test_persist_failure_deletes_stored_object(self):
        storage = MemoryStorageBackend()
        db = _failing_session()

        with pytest.raises(DatabaseFailedError):
            await store_upload(db, storage, uuid.uuid4(), "a.png", "image/png", b"data")

        assert storage.objects == {}
        assert len(storage.delete_calls) == 1
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_compensation_failure_is_logged_not_raised(self, caplog):
        storage = MemoryStorageBackend()
        storage.fail_delete = True
        db = _failing_session()

        with caplog.at_level(logging.ERROR, logger="dashboard.services.upload_service"):
            with pytest.raises(DatabaseFailedError):
                await store_upload(db, storage, uuid.uuid4(), "a.png", "image/png", b"data")

        assert len(storage.objects) == 1
        assert "orphaned object" in caplog.text

    @pytest.mark.asyncio
    async def test_validation_runs_before_any_io(self):
        storage = MemoryStorageBackend()
        db = AsyncMock()

        with pytest.raises(FileTooLargeError):
            await store_upload(db, storage, uuid.uuid4(), "a.png", "image/png", b"0" * (5 * MIB + 1))

        assert storage.objects == {}
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_failure_skips_insert(self):
        storage = MemoryStorageBackend()
        storage.fail_put = True
        db = AsyncMock()
        db.add = MagicMock()

        with pytest.raises(StorageFailedError):
            await store_upload(db, storage, uuid.uuid4(), "a.png", "image/png", b"data")

        db.add.assert_not_called()
        assert storage.delete_calls == []

    @pytest.mark.asyncio
    async def test_compensate_reports_outcome(self):
        storage = MemoryStorageBackend()
        storage.objects[("u", "k")] = b"x"
        assert await compensate_stored_object(storage, "u", "k") is True

        storage.fail_delete = True
        assert await compensate_stored_object(storage, "u", "k") is False

    @pytest.mark.asyncio
    async def test_refresh_failure_after_commit_keeps_object(self):
        storage = MemoryStorageBackend()
        db = AsyncMock()
        db.add = MagicMock()
        db.refresh.side_effect = SQLAlchemyError("connection reset")

        record = await store_upload(db, storage, uuid.uuid4(), "a.png", "image/png", b"data")

        assert record.name.endswith(".png")
        assert len(storage.objects) == 1
        assert storage.delete_calls == []
        db.rollback.assert_not_awaited()
