# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up test environment variables before any imports
# - Gives every test a fresh SQLite database and package directory
# - Mints identity-provider tokens for regular users and admins
# =============================================================================

import os
import time

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key-for-catalog-tests")
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.config import settings
from core.models import AppCreate, UserUpsert
from core.services.catalog_storage import CatalogStorage
from lib.database import Database

ADMIN_EMAIL = "admin@example.com"


# =============================================================================
# Infrastructure Fixtures
# =============================================================================

@pytest.fixture
def database(tmp_path):
    """Fresh file-backed SQLite database with all tables."""
    Database.configure(f"sqlite:///{tmp_path / 'catalog.db'}")
    Database.create_all()
    yield Database
    Database.dispose()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Empty package directory wired into settings."""
    path = tmp_path / "downloads"
    path.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def client(database, upload_dir):
    """HTTP client against the app (lifespan not run; fixtures set it up)."""
    from app.main import app

    return TestClient(app)


# =============================================================================
# Identity Fixtures
# =============================================================================

def make_token(sub: str, email: str | None = None, expires_in: int = 3600, **claims) -> str:
    """Sign a token the way the identity provider would."""
    now = int(time.time())
    payload = {"sub": sub, "iat": now, "exp": now + expires_in, **claims}
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm="HS256")


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers():
    return auth_header(make_token("user-1", "ada@example.com", first_name="Ada", last_name="Lovelace"))


@pytest.fixture
def admin_headers():
    return auth_header(make_token("admin-1", ADMIN_EMAIL, first_name="Root"))


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def sample_user(database):
    """A stored regular user."""
    return CatalogStorage.upsert_user(UserUpsert(id="user-1", email="ada@example.com", first_name="Ada"))


@pytest.fixture
def sample_app_data():
    """Valid upload metadata."""
    return AppCreate(
        name="htop",
        description="Interactive process viewer for Linux",
        category="system",
        version="3.3.0",
    )


@pytest.fixture
def sample_app(database, sample_app_data):
    """A stored active app (no file on disk)."""
    return CatalogStorage.create_app(sample_app_data, "1700000000000-000000001-htop.zip", 1024)


@pytest.fixture
def token_factory():
    """make_token, for tests that need custom identities or claims."""
    return make_token
