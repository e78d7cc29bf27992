"""
Backoffice API: Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh SQLite database file (aiosqlite) with the three
       resource tables created, a Database gateway bound to it, and an HTTPX
       AsyncClient talking to a freshly built app.

Fixture Hierarchy (all function-scoped):
    ├── sqlite_url: URL of a temporary database file
    ├── database: Database gateway with tables created
    ├── test_app: FastAPI app with the gateway attached to app.state
    ├── test_client: HTTPX AsyncClient over ASGITransport
    └── mock_db: AsyncMock standing in for the gateway (service unit tests)
"""

import os
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Settings are read at import time; keep tests off any real database
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from app.config import Settings  # noqa: E402
from app.database import Base, Database, RowSet  # noqa: E402
from app.main import create_app  # noqa: E402
import app.resources  # noqa: E402,F401  (registers the resource tables on Base.metadata)


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'backoffice.db'}"


@pytest.fixture
def test_settings(sqlite_url):
    return Settings(database_url=sqlite_url, log_level="WARNING")


@pytest_asyncio.fixture
async def database(test_settings):
    """
    A Database gateway over a temporary SQLite file with all tables created.

    The pool is disposed after the test.
    """
    db = Database(test_settings)
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db
    await db.dispose()


@pytest.fixture
def test_app(test_settings, database):
    """
    A freshly built app with the gateway attached.

    ASGITransport does not run the lifespan, so the handle the lifespan would
    publish is set here directly.
    """
    app = create_app(test_settings)
    app.state.database = database
    return app


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient routed straight into the app.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/employees")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_db():
    """
    Gateway double for service unit tests.

    execute() returns an empty RowSet unless the test overrides it.
    """
    db = AsyncMock(spec=Database)
    db.execute = AsyncMock(return_value=RowSet())
    return db
