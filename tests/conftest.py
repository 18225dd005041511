"""Shared fixtures.

The settings, engine and app are created at import time, so the
environment is pointed at a throwaway database and upload directory
before anything from ``drive`` is imported.
"""

import os
import shutil
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="drive-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENVIRONMENT"] = "production"
os.environ["ADMIN_BOOTSTRAP"] = "false"
os.environ["LOG_JSON"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from drive.core.config import get_settings  # noqa: E402
from drive.main import app  # noqa: E402
from drive.models.database import Base, SessionLocal, engine  # noqa: E402


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def client(settings):
    """Test client with fresh tables and an empty upload directory."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)
    shutil.rmtree(settings.upload_dir, ignore_errors=True)


@pytest.fixture
def db(client):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def register(client, name="Alice", email="alice@x.com", password="abc123"):
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def upload(client, token, filename="a.txt", content=b"hello", mime_type="text/plain"):
    return client.post(
        "/api/upload",
        files={"file": (filename, content, mime_type)},
        headers=auth_header(token),
    )


@pytest.fixture
def alice(client):
    return register(client)


@pytest.fixture
def bob(client):
    return register(client, name="Bob", email="bob@x.com", password="bob456")
