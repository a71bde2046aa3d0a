"""
Questions Unlimited Backend: Test Configuration (conftest.py)
==============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Service and route tests run against a real in-memory SQLite store
       (aiosqlite + StaticPool, foreign keys on), so joins, pagination and
       ON DELETE CASCADE are exercised for real.

Fixture Hierarchy (all function-scoped):
    engine           fresh in-memory database with every table created
    ├── bank         QuestionBank around that engine
    │   ├── db_session   one AsyncSession (service tests)
    │   └── test_client  HTTPX AsyncClient over an app using `bank`
    mock_db_session  AsyncMock session for store-failure tests
    sample_question  the canonical "Capital of France?" payload
"""

import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# Must be set BEFORE any questionbank import: settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import StaticPool

from questionbank.database import Base, QuestionBank, create_engine_for
from questionbank.schemas.question import QuestionIn
import questionbank.models  # noqa: F401


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    An in-memory SQLite engine with the full schema.

    StaticPool keeps the single connection alive; without it every new
    connection would see an empty database.
    """
    test_engine = create_engine_for(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def bank(engine) -> QuestionBank:
    return QuestionBank(engine)


@pytest_asyncio.fixture
async def db_session(bank) -> AsyncGenerator[AsyncSession, None]:
    """
    One session for a whole service test.

    Write services commit through it; the engine fixture gives every test
    a fresh in-memory database, so nothing leaks between tests.
    """
    async with bank.session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_db_session():
    """
    A mock async session for tests that need the driver to fail.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_question() -> QuestionIn:
    return QuestionIn(title="Capital", content="Capital of France?", tags=["geo"])


@pytest_asyncio.fixture
async def test_client(bank):
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport does not run the lifespan, so the bank is injected
    through create_app instead of being connected from the environment.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from questionbank.main import create_app

    app = create_app(question_bank=bank)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
