import os
import tempfile
import uuid
from pathlib import Path

# Point the app at throwaway storage before anything imports db.database
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="videos_micro_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_ROOT / 'test.db'}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ASSETS_ROOT"] = str(_TEST_ROOT / "assets")
os.environ["THUMBNAIL_STORAGE"] = "disk"

import pytest
from fastapi.testclient import TestClient

from main import app
from db.connection import create_tables
from db.database import Base, SessionLocal, engine
from db.queries import create_video
from Endpoints.auth import create_access_token
from utils.thumbnail_store import DiskStore, MemoryStore, get_thumbnail_store

BASE_URL = "http://localhost:8091"


@pytest.fixture(autouse=True)
def fresh_tables():
    create_tables()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def disk_store(tmp_path):
    return DiskStore(tmp_path / "assets", BASE_URL)


@pytest.fixture()
def memory_store():
    return MemoryStore(BASE_URL)


def _client_with_store(store):
    app.dependency_overrides[get_thumbnail_store] = lambda: store
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def disk_client(disk_store):
    yield from _client_with_store(disk_store)


@pytest.fixture()
def memory_client(memory_store):
    yield from _client_with_store(memory_store)


@pytest.fixture()
def owner_id():
    return uuid.uuid4()


@pytest.fixture()
def other_user_id():
    return uuid.uuid4()


@pytest.fixture()
def auth_headers():
    def _headers(user_id, **token_kwargs):
        return {"Authorization": f"Bearer {create_access_token(user_id, **token_kwargs)}"}
    return _headers


@pytest.fixture()
def video(db_session, owner_id):
    return create_video(db_session, user_id=owner_id, title="Boots on the ground", description="first upload")
