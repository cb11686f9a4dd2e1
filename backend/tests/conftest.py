"""
School API Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The environment is prepared at the top of this module, before any
       school_api import, because settings are read once at import time.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: AsyncMock database session (no real DB needed)
    ├── database: empty SQLite schema, dropped after the test
    ├── test_client: HTTPX AsyncClient bound to the app (uses `database`)
    ├── registered_user: Ann, registered through the API
    └── auth_headers: Authorization header carrying Ann's token
"""

import os
import tempfile

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (must run before school_api is imported)
# ══════════════════════════════════════════════════════════════════════════

_db_dir = tempfile.mkdtemp(prefix="school_api_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_dir}/test.db"
os.environ["JWT_SECRET"] = "test-secret-key-with-at-least-32-bytes"
os.environ["BCRYPT_ROUNDS"] = "4"  # minimum cost keeps hashing fast in tests
os.environ["AUTH_TRUST_MODEL"] = "store"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from school_api.database import create_all, drop_all, engine  # noqa: E402

ANN = {"name": "Ann", "email": "ann@x.com", "password": "secret1"}


def result_with(value) -> MagicMock:
    """A mocked SQLAlchemy Result whose scalar_one_or_none() returns `value`."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_login(mock_db_session):
            mock_db_session.execute.return_value = result_with(user)
            token = await service.login(mock_db_session, "ann@x.com", "secret1")
    """
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result_with(None))
    session.get = AsyncMock(return_value=None)
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def database():
    """
    Fresh schema on the temporary SQLite file for one test.

    The engine is disposed afterwards so no pooled connection outlives the
    test's event loop.
    """
    await create_all()
    yield engine
    await drop_all()
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(database):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from school_api.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def registered_user(test_client):
    response = await test_client.post("/auth/register", json=ANN)
    assert response.status_code == 201
    return response.json()["data"]


@pytest_asyncio.fixture
async def auth_headers(test_client, registered_user):
    response = await test_client.post(
        "/auth/login", json={"email": ANN["email"], "password": ANN["password"]}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
