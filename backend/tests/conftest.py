"""
NoteNest Backend - Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all
       tests. Environment variables are set before any notenest import so
       Settings picks up the test values.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_session: real AsyncSession on a throwaway SQLite file; tables are
    │               created before and dropped after every test
    ├── mock_db_session: AsyncMock session for failure-path unit tests
    ├── memory_storage: InMemoryFileStorage (no disk access)
    ├── local_storage: LocalFileStorage rooted in tmp_path
    ├── make_user: inserts a user and returns (user, token)
    ├── sample_image_bytes: minimal PNG payload
    ├── app: fresh application; file storage dependency → memory_storage
    └── test_client: HTTPX AsyncClient wired to the app fixture
"""

import os
import tempfile
from typing import AsyncGenerator, Dict, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

_TEST_DIR = tempfile.mkdtemp(prefix="notenest_test_")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_DIR, "uploads")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"  # minimum cost keeps the suite fast

from notenest.database import Base, async_session_factory, engine  # noqa: E402
from notenest.models.user import User  # noqa: E402
from notenest.services.passwords import hash_password  # noqa: E402
from notenest.services.storage import FileStorage, LocalFileStorage  # noqa: E402
from notenest.services.token_service import token_service  # noqa: E402

import notenest.models  # noqa: E402,F401


class InMemoryFileStorage(FileStorage):
    """FileStorage fake that keeps files in a dict."""

    def __init__(self):
        self.files: Dict[str, bytes] = {}

    async def put(self, name: str, content: bytes) -> None:
        self.files[name] = content

    async def delete(self, name: str) -> bool:
        return self.files.pop(name, None) is not None

    async def exists(self, name: str) -> bool:
        return name in self.files


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Empty schema for one test. The engine is disposed so no pooled
    connection outlives the test's event loop."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
        with pytest.raises(DatabaseError): ...
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def memory_storage() -> InMemoryFileStorage:
    return InMemoryFileStorage()


@pytest.fixture
def local_storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(root=str(tmp_path / "uploads"))


@pytest.fixture
def sample_image_bytes() -> bytes:
    """PNG signature plus an IHDR chunk header; enough to look like an image."""
    return b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 32


@pytest_asyncio.fixture
async def make_user(database):
    """
    Factory inserting a user directly and issuing a token for it.

    Usage:
        user, token = await make_user("alice")
    """

    async def _make(
        username: str,
        email: Optional[str] = None,
        password: str = "password123",
    ) -> Tuple[User, str]:
        async with async_session_factory() as session:
            user = User(
                username=username,
                email=email or f"{username}@example.com",
                password_hash=hash_password(password),
            )
            session.add(user)
            await session.commit()
        return user, token_service.issue(user.id, user.username)

    return _make


@pytest.fixture
def app(memory_storage):
    """A freshly created app whose file storage is memory_storage."""
    from notenest.main import create_app
    from notenest.routes.dependencies import get_file_storage

    application = create_app()
    application.dependency_overrides[get_file_storage] = lambda: memory_storage
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(database, app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app fixture.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
