"""Database engine and session factory with the psycopg3 async driver.

One engine (and therefore one connection pool) is created at startup and
shared by every concurrent sweep invocation. Sessions are cheap and created
per unit of work.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from outbox_sweeper.infra.metrics.prometheus import (
    database_pool_checkedout,
    database_pool_checkout_time_seconds,
)

if TYPE_CHECKING:
    from outbox_sweeper.core.settings.postgres import PostgresSettings

logger = logging.getLogger(__name__)

OUTBOX_SCHEMA = "core"


def create_engine(db_settings: PostgresSettings) -> AsyncEngine:
    """Create the shared async engine.

    SQLite has no schemas, so for SQLite URLs the ``core`` schema is
    translated away and the outbox table is addressed as plain ``outbox``.

    Args:
        db_settings: Database settings.

    Returns:
        Configured AsyncEngine.
    """
    engine = create_async_engine(db_settings.url, **db_settings.engine_kwargs())
    if not db_settings.is_postgres:
        engine = engine.execution_options(schema_translate_map={OUTBOX_SCHEMA: None})

    _instrument_pool(engine)

    logger.info(
        "Database engine created",
        extra={"database_url": db_settings.masked_url, "pool_size": db_settings.pool_size},
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def check_connection(engine: AsyncEngine) -> None:
    """Run ``SELECT 1`` so startup fails fast on a bad DATABASE_URL.

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the database is unreachable.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("Database connection established")


async def dispose_engine(engine: AsyncEngine) -> None:
    """Close all pooled connections."""
    await engine.dispose()
    logger.info("Database engine disposed")


# ============================================================================
# Pool Checkout/Checkin Metrics
# ============================================================================


def _instrument_pool(engine: AsyncEngine) -> None:
    """Attach checkout/checkin listeners to the engine's pool."""
    pool = engine.sync_engine.pool

    @event.listens_for(pool, "checkout")
    def _receive_checkout(dbapi_conn: Any, connection_record: Any, connection_proxy: Any) -> None:
        _ = dbapi_conn, connection_proxy
        connection_record.info["checkout_start"] = time.perf_counter()
        database_pool_checkedout.inc()

    @event.listens_for(pool, "checkin")
    def _receive_checkin(dbapi_conn: Any, connection_record: Any) -> None:
        _ = dbapi_conn
        checkout_start = connection_record.info.pop("checkout_start", None)
        if checkout_start is not None:
            database_pool_checkout_time_seconds.observe(time.perf_counter() - checkout_start)
            database_pool_checkedout.dec()


__all__ = [
    "OUTBOX_SCHEMA",
    "check_connection",
    "create_engine",
    "create_session_factory",
    "dispose_engine",
]
