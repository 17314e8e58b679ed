# tests/conftest.py

"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import pytest
from chesselo.db.session import get_db, init_models
from chesselo.main import app
from chesselo.store import InMemoryRatingStore
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database per test.

    Rating updates commit and roll back on their own, so tests can't share
    one outer transaction; a new database per test keeps them isolated.
    """
    test_engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await init_models(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Fixture to provide a database session bound to the test database."""
    session_factory = async_sessionmaker(
        bind=engine, expire_on_commit=False, autocommit=False, autoflush=False
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Fixture to provide an async test client for the API."""

    # Override the get_db dependency to use the test database
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    del app.dependency_overrides[get_db]


@pytest.fixture
def memory_store() -> InMemoryRatingStore:
    return InMemoryRatingStore()
