"""Shared test fixtures for the AkaashPeti API test suite.

Tests run against an in-memory SQLite database shared through a StaticPool.
Every table is emptied before each test, so tests are fully isolated.

The Supabase object store is replaced by ``FakeObjectStore`` (an in-memory
dict whose failures can be switched on per test) and local-disk storage
points at a per-test temporary directory.
"""

import os
import tempfile

# Point the app at throwaway resources before any app imports.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="akaashpeti-uploads-")
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["LOG_FORMAT"] = "text"
os.environ["ENVIRONMENT"] = "development"
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = ""

from typing import Dict, List, Tuple

import pytest
from fastapi.testclient import TestClient

from akaashpeti.database import Base, SessionLocal, get_db
from akaashpeti.main import app
from akaashpeti.api.dependencies import get_local_store, get_object_store
from akaashpeti.exceptions import ObjectStoreError
from akaashpeti.middleware.request_context import rate_limiter
from akaashpeti.services import PersistenceGateway
from akaashpeti.services import auth_service
from akaashpeti.storage import LocalDiskStore

DEFAULT_PASSWORD = "correct-horse-battery"


class FakeObjectStore:
    """In-memory ObjectStore. Flip ``fail_puts`` / ``fail_removes`` to simulate an outage."""

    def __init__(self):
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.removed: List[str] = []
        self.fail_puts = False
        self.fail_removes = False

    def put(self, key: str, data: bytes, content_type: str) -> None:
        if self.fail_puts:
            raise ObjectStoreError("simulated object store outage")
        self.objects[key] = (data, content_type)

    def create_signed_url(self, key: str, expires_in: int) -> str:
        if key not in self.objects:
            raise ObjectStoreError(f"Object not found: {key}")
        return f"https://storage.test/{key}?expires_in={expires_in}"

    def remove(self, keys: List[str]) -> None:
        if self.fail_removes:
            raise ObjectStoreError("simulated object store outage")
        for key in keys:
            self.objects.pop(key, None)
            self.removed.append(key)


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty every table before each test.

    Runs before the test (not after) so test failures leave data
    available for debugging.
    """
    db = SessionLocal()
    try:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture()
def local_store(tmp_path) -> LocalDiskStore:
    return LocalDiskStore(tmp_path / "uploads")


@pytest.fixture()
def gateway(db, object_store, local_store) -> PersistenceGateway:
    return PersistenceGateway(db, object_store, local_store)


@pytest.fixture()
def client(db, object_store, local_store):
    """FastAPI TestClient with the DB session and both storage backends overridden."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_object_store] = lambda: object_store
    app.dependency_overrides[get_local_store] = lambda: local_store
    rate_limiter.reset()  # Reset rate limiter so tests don't hit 429
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db, email: str, password: str = DEFAULT_PASSWORD, name: str = None):
    """Create a user directly through the service layer."""
    return auth_service.register_user(db, email, password, name)


def signup(client, email: str, password: str = DEFAULT_PASSWORD, name: str = None) -> dict:
    """Sign up through the API. Returns ``{"token", "user", "headers"}``."""
    resp = client.post("/api/auth/signup", json={"email": email, "password": password, "name": name})
    assert resp.status_code == 201, resp.text
    data = resp.json()
    data["headers"] = {"Authorization": f"Bearer {data['token']}"}
    return data


def upload(client, headers: dict, name: str = "report.pdf", content: bytes = b"%PDF-1.4 test",
           mime_type: str = "application/pdf", folder_id: str = None):
    """Multipart upload helper. Returns the raw response."""
    data = {"folder_id": folder_id} if folder_id else {}
    return client.post(
        "/api/files",
        files={"file": (name, content, mime_type)},
        data=data,
        headers=headers,
    )


@pytest.fixture()
def alice(client) -> dict:
    return signup(client, "alice@example.com", name="Alice")


@pytest.fixture()
def bob(client) -> dict:
    return signup(client, "bob@example.com", name="Bob")


@pytest.fixture()
def carol(client) -> dict:
    return signup(client, "carol@example.com", name="Carol")
