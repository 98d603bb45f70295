"""
Pytest configuration.
Each test gets its own in-memory SQLite database with foreign keys enforced.
"""
import os

os.environ["TESTING"] = "1"
os.environ["AUTO_CREATE_SCHEMA"] = "1"

from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import api_store.models.all  # noqa: F401
from api_store.db.base import Base
from api_store.db.session import create_session_factory, get_db
from api_store.main import app
from tests.mocks.services import MockKafkaProducer, mock_db_session, patch_kafka

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with every table."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> sessionmaker:
    return create_session_factory(test_engine)


@pytest_asyncio.fixture
async def db_session(session_factory: sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for each test."""
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


@pytest_asyncio.fixture
async def async_client(session_factory: sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async client for testing API endpoints."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def mock_kafka() -> Generator[MockKafkaProducer, None, None]:
    """Provide a mock Kafka producer and patch the Kafka functions."""
    mock_kafka_instance, patches = patch_kafka()

    for patch_item in patches:
        patch_item.start()

    yield mock_kafka_instance

    for patch_item in patches:
        patch_item.stop()


@pytest.fixture
def mock_session() -> AsyncSession:
    """Provide a mock database session for unit tests."""
    return mock_db_session()
