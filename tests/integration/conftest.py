"""Fixtures for tests against a real PostgreSQL server.

Row claims depend on ``SELECT ... FOR UPDATE SKIP LOCKED``, which SQLite does
not provide. These fixtures start one PostgreSQL container per session with
testcontainers and skip the tests when Docker is unavailable.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import text

from outbox_sweeper.core.settings import PostgresSettings
from outbox_sweeper.infra.database import Base, create_engine, create_session_factory

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker


@pytest.fixture(scope="session")
def postgres_url() -> Iterator[str]:
    """Start a PostgreSQL container for the test session.

    Yields:
        Connection URL for the async psycopg driver.
    """
    pytest.importorskip("testcontainers.postgres", reason="testcontainers.postgres is required")
    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer("postgres:16-alpine")
    try:
        container.start()
    except Exception as exc:  # pragma: no cover - environment dependent
        pytest.skip(f"PostgreSQL container unavailable: {exc}", allow_module_level=True)

    # get_connection_url() may return postgresql:// or postgresql+psycopg2://
    url = container.get_connection_url().replace(
        "postgresql+psycopg2://", "postgresql+psycopg://"
    ).replace("postgresql://", "postgresql+psycopg://")
    yield url
    container.stop()


@pytest.fixture
async def db_engine(postgres_url: str) -> AsyncGenerator[AsyncEngine]:
    """Engine on the container with a fresh ``core.outbox`` table per test."""
    engine = create_engine(PostgresSettings(url=postgres_url, pool_size=5))
    async with engine.begin() as conn:
        await conn.execute(text("CREATE SCHEMA IF NOT EXISTS core"))
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)
