"""Shared pytest fixtures for the AppShare backend.

Provides an in-memory database, local object storage, test users with their
projects and applications, APK upload helpers and an API test client.
"""

import os

# CRITICAL: Set environment BEFORE any other imports that might use config
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import MagicMock, Mock

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  registers every table on Base
from database import Base, enable_sqlite_foreign_keys, get_transaction_manager
from models import Application, Project, User
from repositories.unit_of_work import TransactionManager
from services.artifact_ingestion import ArtifactIngestionPipeline
from storage import get_storage
from storage.local import LocalStorage
from tests.fixtures.apk_builder import build_apk

PUBLIC_BASE_URL = "https://cdn.appshare.test/files"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def test_engine():
    """In-memory SQLite shared by every session of one test.

    StaticPool keeps a single connection so all sessions see the same
    database; foreign keys are switched on for it like in production.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=test_engine,
    )


@pytest.fixture
def tx(session_factory: sessionmaker) -> TransactionManager:
    return TransactionManager(session_factory)


@pytest.fixture
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """A session for asserting on database state directly."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def mock_db_session() -> MagicMock:
    """Create a mocked database session for unit tests."""
    mock_session = MagicMock(spec=Session)
    mock_session.commit.return_value = None
    mock_session.rollback.return_value = None
    mock_session.add.return_value = None
    return mock_session


def count_rows(session_factory: sessionmaker, model, include_deleted: bool = True) -> int:
    """Count rows with a fresh session so no identity-map state leaks in."""
    session = session_factory()
    try:
        query = session.query(model)
        if not include_deleted:
            query = query.filter(model.deleted_at.is_(None))
        return query.count()
    finally:
        session.close()


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(str(tmp_path / "storage"), PUBLIC_BASE_URL)


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    """Temp root for buffered artifacts, so tests can check it is left empty."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def pipeline(tx: TransactionManager, storage: LocalStorage, scratch_dir: Path) -> ArtifactIngestionPipeline:
    return ArtifactIngestionPipeline(tx, storage, scratch_dir=str(scratch_dir))


@pytest.fixture
def upload_apk(storage: LocalStorage) -> Callable[..., str]:
    """Store an APK in local storage and return its public URL.

    Keyword arguments other than `path` and `data` are passed to build_apk.
    """

    def _upload(path: str = "uploads/app.apk", data: bytes = None, **fields) -> str:
        if data is None:
            data = build_apk(**fields)
        return storage.put_bytes(path, data)

    return _upload


# ============================================================================
# User & Project Fixtures
# ============================================================================

@pytest.fixture
def test_user(tx: TransactionManager) -> User:
    """Create a test user.

    Password: TestPass123
    """
    from services.auth import hash_password

    with tx.repositories() as uow:
        return uow.users.create(
            email="test@example.com",
            username="test_user",
            hashed_password=hash_password("TestPass123"),
        )


@pytest.fixture
def other_user(tx: TransactionManager) -> User:
    """A second user who owns nothing the first user owns."""
    with tx.repositories() as uow:
        return uow.users.create(
            email="other@example.com",
            username="other_user",
            hashed_password="$2b$12$hashedpassword2",
        )


@pytest.fixture
def test_project(tx: TransactionManager, test_user: User) -> Project:
    with tx.repositories() as uow:
        return uow.projects.create(owner_id=test_user.id, title="Test Project")


@pytest.fixture
def test_application(tx: TransactionManager, test_project: Project) -> Application:
    with tx.repositories() as uow:
        return uow.applications.create(
            project_id=test_project.id,
            title="Example App",
            package_name="com.example.app",
        )


@pytest.fixture
def mock_user() -> User:
    """Create a mock User object for unit tests."""
    user = Mock(spec=User)
    user.id = uuid.uuid4()
    user.username = "test_user"
    user.email = "test@example.com"
    user.token_version = 1
    return user


# ============================================================================
# Authentication Fixtures
# ============================================================================

@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Authorization headers for test_user."""
    return {"Authorization": f"Bearer {create_jwt_token(test_user.id)}"}


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return {"Authorization": f"Bearer {create_jwt_token(other_user.id)}"}


# ============================================================================
# FastAPI Test Client
# ============================================================================

@pytest.fixture
def client(tx: TransactionManager, storage: LocalStorage) -> TestClient:
    """Create FastAPI test client backed by the test database and storage."""
    # Import app here to avoid loading it for unit tests
    from main import app

    app.dependency_overrides[get_transaction_manager] = lambda: tx
    app.dependency_overrides[get_storage] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client

    # Clean up
    app.dependency_overrides.clear()


# ============================================================================
# Helper Functions
# ============================================================================

def create_jwt_token(
    user_id,
    *,
    token_type: str = "access",
    token_ver: int = 1,
    secret_key: str = "test-secret-key",
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Helper to create JWT tokens for authentication tests."""
    payload = {
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + expires_in,
        "type": token_type,
        "token_ver": token_ver,
    }
    return jwt.encode(payload, secret_key, algorithm="HS256")


def assert_error_response(response, status_code: int, code: str, field: str = None) -> dict:
    """Check the shape every domain error is rendered with."""
    assert response.status_code == status_code, response.text
    body = response.json()
    assert body["status"] == status_code
    assert body["code"] == code
    assert body["field"] == field
    assert body["message"]
    return body
