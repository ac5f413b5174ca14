"""
Shared pytest fixtures for the Ketabyar test suite.

Each test gets its own SQLite database file with the full schema, an
AsyncSession bound to it, and (for API tests) an httpx client talking to
the app with the database and settings dependencies overridden.
"""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ketabyar.api.dependencies import get_settings
from ketabyar.config import Settings
from ketabyar.main import app
from ketabyar.models.database import Base, Book, get_db
from tests.fakes import FABULOUS_CONTEXT


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def db_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Engine for a fresh SQLite file with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def book(db_session: AsyncSession) -> Book:
    """A stored book whose content contains the word 'fabulous'."""
    book = Book(title="T", author="A", content=FABULOUS_CONTEXT)
    db_session.add(book)
    await db_session.commit()
    await db_session.refresh(book)
    return book


# ============================================================================
# APPLICATION FIXTURES
# ============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        gemini_api_key="env-test-key",
        api_auth_token=None,
        translation_cache_enabled=True,
    )


@pytest_asyncio.fixture
async def client(
    session_maker: async_sessionmaker,
    test_settings: Settings,
) -> AsyncIterator[AsyncClient]:
    """HTTP client for the app, backed by the per-test database."""

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()
