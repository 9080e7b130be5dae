"""Pytest configuration and shared fixtures.

Organization:
    - Environment: minimal settings so nothing reaches real infrastructure
    - Database Fixtures: in-memory SQLite engine with the outbox table
    - Outbox Fixtures: message factory and seeding helper
    - AWS Fixtures: mocked SQS/SNS clients and dispatchers

SQLite has no row locking; tests that depend on ``FOR UPDATE SKIP LOCKED``
live in tests/integration and run against a PostgreSQL container.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
import itertools
import os
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock

import pytest

from outbox_sweeper.core.settings import PostgresSettings, get_logging_settings, get_settings
from outbox_sweeper.infra.database import Base, create_engine, create_session_factory
from outbox_sweeper.infra.messaging.dispatchers import Dispatchers, QueueDispatcher, TopicDispatcher
from outbox_sweeper.infra.outbox.models import OutboxMessage

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Never read a developer's .env during tests
os.environ["ENV_FILE"] = os.devnull
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AWS_REGION", "eu-west-1")

QUEUE_URL = "https://sqs.eu-west-1.amazonaws.com/123456789012/orders"
TOPIC_ARN = "arn:aws:sns:eu-west-1:123456789012:orders"

BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Reload settings from the (monkeypatched) environment in every test."""
    get_settings.cache_clear()
    get_logging_settings.cache_clear()
    yield
    get_settings.cache_clear()
    get_logging_settings.cache_clear()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory SQLite engine with the outbox table.

    The ``core`` schema is translated away by ``create_engine`` for SQLite.
    """
    engine = create_engine(PostgresSettings(url="sqlite+aiosqlite:///:memory:"))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return create_session_factory(db_engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Single session for repository tests."""
    async with session_factory() as session:
        yield session


# ============================================================================
# Outbox Fixtures
# ============================================================================


@pytest.fixture
def make_message() -> Callable[..., OutboxMessage]:
    """Factory for unsaved outbox rows.

    Each call gets a unique ``message_id`` and a timestamp one second after
    the previous one, unless overridden.

    Example:
        msg = make_message(topic="orders", channel_address=QUEUE_URL)
    """
    counter = itertools.count(1)

    def _make(**overrides: Any) -> OutboxMessage:
        n = next(counter)
        values: dict[str, Any] = {
            "message_id": f"msg-{n}",
            "topic": "orders",
            "channel_address": QUEUE_URL,
            "timestamp": BASE_TIME + timedelta(seconds=n),
            "body": f'{{"order": {n}}}',
        }
        values.update(overrides)
        return OutboxMessage(**values)

    return _make


@pytest.fixture
def seed(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Any]:
    """Insert messages in their own committed transaction and return their ids."""

    async def _seed(*messages: OutboxMessage) -> list[int]:
        async with session_factory() as session:
            session.add_all(messages)
            await session.commit()
            return [m.id for m in messages]

    return _seed


# ============================================================================
# AWS Fixtures
# ============================================================================


@pytest.fixture
def sqs_client() -> AsyncMock:
    """Mock SQS client accepting every entry."""
    client = AsyncMock()
    client.send_message_batch.return_value = {"Successful": [], "Failed": []}
    return client


@pytest.fixture
def sns_client() -> AsyncMock:
    """Mock SNS client accepting every entry."""
    client = AsyncMock()
    client.publish_batch.return_value = {"Successful": [], "Failed": []}
    return client


@pytest.fixture
def dispatchers(sqs_client: AsyncMock, sns_client: AsyncMock) -> Dispatchers:
    """Dispatchers over the mocked clients."""
    return Dispatchers(queue=QueueDispatcher(sqs_client), topic=TopicDispatcher(sns_client))
