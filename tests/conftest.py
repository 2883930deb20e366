"""
Users API: Test Configuration (conftest.py)
============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── fixed_clock / normalizer: deterministic OutcomeNormalizer
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── database: Fresh SQLite schema, dropped afterwards
    ├── memory_service: Empty in-memory store wired into the routes
    ├── test_client: HTTPX AsyncClient against the default app
    └── make_client: factory for clients against custom-built apps
"""

import os

# Override settings for testing BEFORE any users_api imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["DISCLOSURE_POLICY"] = "verbose"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from users_api.config import DisclosurePolicy
from users_api.envelope import OutcomeNormalizer
from users_api.faults import FaultClassifier

FIXED_TIMESTAMP = "2024-01-15T12:00:00.000Z"


# ══════════════════════════════════════════════════════════════════════════
# Normalizer Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIMESTAMP


@pytest.fixture
def normalizer(fixed_clock):
    """OutcomeNormalizer with the verbose policy and a frozen timestamp."""
    return OutcomeNormalizer(FaultClassifier(DisclosurePolicy.VERBOSE), clock=fixed_clock)


# ══════════════════════════════════════════════════════════════════════════
# Persistence Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_find_one(mock_db_session):
            mock_db_session.get.return_value = user
            result = await SqlUserService(mock_db_session).find_one(user.id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def database():
    """
    Creates the schema in the SQLite test database and drops it afterwards.

    The engine is disposed on teardown so no pooled connection outlives the
    test's event loop.
    """
    from users_api.database import Base, dispose_engine, engine
    from users_api.models.user import User  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await dispose_engine()


@pytest.fixture
def memory_service(monkeypatch):
    """Swap the routes' in-memory store for an empty one."""
    from users_api.routes import memory_users
    from users_api.services.memory_user_service import MemoryUserService

    service = MemoryUserService()
    monkeypatch.setattr(memory_users, "memory_user_service", service)
    return service


@pytest.fixture
def sample_user_payload():
    """A valid POST /create-user body (camelCase, as clients send it)."""
    return {
        "firstName": "John",
        "lastName": "Doe",
        "username": "john_doe",
        "email": "john.doe@example.com",
        "password": "strongpassword123",
    }


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(database, memory_service):
    """
    HTTPX AsyncClient talking to the default app through ASGITransport.

    raise_app_exceptions=False: Starlette re-raises unhandled errors after
    the 500 envelope has been sent; the client should only see the response.
    """
    from users_api.main import app

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def make_client(database, memory_service):
    """
    Factory for clients against freshly built apps.

    Usage:
        client = await make_client(create_app(disclosure_policy=DisclosurePolicy.MASKED))
    """
    clients = []

    async def _make(app):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        client = AsyncClient(transport=transport, base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
