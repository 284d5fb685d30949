"""
LearnLoop Backend - Test Configuration (conftest.py)
====================================================

Shared fixtures for the whole suite.

Function-scoped fixtures:
    ├── mock_db_session: AsyncMock session; flush() fills ids and timestamps
    ├── temp_storage:    temporary directory for file operations
    ├── make_user:       factory for detached User rows
    ├── test_user:       one local user
    └── test_client:     httpx AsyncClient wired to the app, with the auth
                         gate and the DB session overridden
"""

import os
import tempfile
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time: point them at test values first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="learnloop_test_")
os.environ["STORAGE_PUBLIC_URL"] = "http://testserver/api/v1/files"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.models.user import AUTH_PROVIDER_LOCAL, User  # noqa: E402


def fill_defaults(obj) -> None:
    """What a real flush would populate: primary key and timestamps."""
    now = datetime.now(timezone.utc)
    if getattr(obj, "id", None) is None:
        obj.id = uuid.uuid4()
    for attr in ("created_at", "updated_at"):
        if getattr(obj, attr, None) is None:
            setattr(obj, attr, now)
    for attr, default in (("completed", False), ("downloaded_pdf", False), ("original_note", "")):
        if hasattr(type(obj), attr) and getattr(obj, attr, None) is None:
            setattr(obj, attr, default)


@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for AsyncSession.

    `added` lists every object passed to add(); flush() gives them ids and
    timestamps like the database would.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = task
    """
    session = AsyncMock()
    session.added = []

    def _add(obj):
        session.added.append(obj)

    async def _flush(*args, **kwargs):
        for obj in session.added:
            fill_defaults(obj)

    session.add = MagicMock(side_effect=_add)
    session.flush = AsyncMock(side_effect=_flush)
    session.execute = AsyncMock(return_value=MagicMock())
    session.get = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def make_user():
    def _make(name="Alice", email="alice@example.com", password="secret", provider=AUTH_PROVIDER_LOCAL):
        user = User(name=name, email=email, auth_provider=provider)
        if provider == AUTH_PROVIDER_LOCAL and password:
            user.set_password(password)
        fill_defaults(user)
        return user

    return _make


@pytest.fixture
def test_user(make_user):
    return make_user()


@pytest_asyncio.fixture
async def test_client(test_user, mock_db_session):
    """
    HTTP client for endpoint tests. No lifespan runs and no database is
    touched: protected routes see `test_user`, services get `mock_db_session`.
    """
    from app.database import get_db_session
    from app.main import app
    from app.middleware.auth import get_current_user

    async def _session_override():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = _session_override
    app.dependency_overrides[get_current_user] = lambda: test_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
