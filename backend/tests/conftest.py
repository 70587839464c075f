"""Shared test fixtures and configuration for backend tests."""
import asyncio
import os
import shutil
import tempfile

# Settings are read at import time, so the test environment must be set first
_TEST_DIR = tempfile.mkdtemp(prefix="dashboard-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["FILE_STORAGE_PATH"] = os.path.join(_TEST_DIR, "uploads")
os.environ["AZURE_STORAGE_CONNECTION_STRING"] = ""
os.environ["SECRET_KEY"] = "test-secret-key-0123456789"
os.environ["WEATHER_API_KEY"] = "test-weather-key"
os.environ["ENVIRONMENT"] = "development"

import pytest
from fastapi.testclient import TestClient

from dashboard.database import engine
from dashboard.dependencies import get_storage
from dashboard.main import app
from dashboard.models import Base
from dashboard.services.file_storage import StorageBackend, StorageError


class MemoryStorageBackend(StorageBackend):
    """In-memory backend with switchable failures."""

    name = "memory"

    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}
        self.fail_put = False
        self.fail_get = False
        self.fail_delete = False
        self.delete_calls: list[tuple[str, str]] = []

    async def put(self, user_id, name, data, content_type):
        if self.fail_put:
            raise StorageError("put failed")
        self.objects[(user_id, name)] = data
        return f"memory://{user_id}/{name}"

    async def get(self, user_id, name):
        if self.fail_get or (user_id, name) not in self.objects:
            raise StorageError("get failed")
        return self.objects[(user_id, name)]

    async def delete(self, user_id, name):
        self.delete_calls.append((user_id, name))
        if self.fail_delete:
            raise StorageError("delete failed")
        self.objects.pop((user_id, name), None)


async def _drop_all():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def client():
    """TestClient with a fresh schema per test."""
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    asyncio.run(_drop_all())
    shutil.rmtree(os.environ["FILE_STORAGE_PATH"], ignore_errors=True)


@pytest.fixture
def memory_storage(client):
    storage = MemoryStorageBackend()
    app.dependency_overrides[get_storage] = lambda: storage
    return storage


def register_and_login(client, email="alice@example.com", password="s3cret-pass", name="Alice"):
    """Create a user and return Authorization headers for it."""
    resp = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
    assert resp.status_code == 201, resp.text
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['accessToken']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)


def upload(client, headers, filename="photo.png", content=b"\x89PNG data", mime="image/png"):
    return client.post("/api/upload", files={"file": (filename, content, mime)}, headers=headers)
