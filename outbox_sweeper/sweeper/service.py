"""Sweeper process lifecycle.

:class:`SweeperService` builds the shared resources in dependency order and
tears them down in reverse:

    startup:  engine -> AWS clients -> sweeper -> scheduler
    shutdown: scheduler (waits for in-flight sweeps) -> AWS clients -> engine

Logging and settings are set up by the entrypoint before the service is
created, so that configuration errors are logged too.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from outbox_sweeper.infra.aws.clients import AwsClients
from outbox_sweeper.infra.database.session import (
    check_connection,
    create_engine,
    create_session_factory,
    dispose_engine,
)
from outbox_sweeper.infra.messaging.dispatchers import Dispatchers
from outbox_sweeper.sweeper.engine import OutboxSweeper
from outbox_sweeper.sweeper.scheduler import SweepScheduler

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncEngine

    from outbox_sweeper.core.settings.unified import Settings

logger = logging.getLogger(__name__)


class SweeperService:
    """Owns the engine, the AWS clients, the sweeper and the scheduler."""

    def __init__(
        self,
        settings: Settings,
        *,
        aws_clients: AwsClients | None = None,
        engine: AsyncEngine | None = None,
    ) -> None:
        """Initialize the service without starting anything.

        Args:
            settings: Loaded settings
            aws_clients: AWS clients to use instead of building them from settings
            engine: Database engine to use instead of building it from settings
        """
        self.settings = settings
        self.aws_clients = aws_clients or AwsClients(settings.aws)
        self._engine = engine
        self._owns_engine = engine is None
        self.sweeper: OutboxSweeper | None = None
        self.scheduler: SweepScheduler | None = None
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    @property
    def engine(self) -> AsyncEngine | None:
        return self._engine

    async def start(self, *, schedule: bool = True) -> None:
        """Build the shared resources and, by default, start the scheduler.

        Args:
            schedule: Start periodic sweeps. ``False`` builds the sweeper only,
                for one-shot invocations.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If the database is unreachable.
        """
        if self._started:
            return

        logger.info(
            "Starting outbox sweeper",
            extra={
                "service": self.settings.app.service_name,
                "version": self.settings.app.version,
                "sweep_interval_ms": self.settings.sweeper.sweep_interval_ms,
                "batch_size": self.settings.sweeper.batch_size,
            },
        )

        if self._engine is None:
            self._engine = create_engine(self.settings.db)
        try:
            await check_connection(self._engine)
            await self.aws_clients.startup()
        except Exception:
            await self._close_resources()
            raise

        self.sweeper = OutboxSweeper(
            create_session_factory(self._engine),
            Dispatchers.from_clients(self.aws_clients),
            batch_size=self.settings.sweeper.batch_size,
        )

        if schedule:
            self.scheduler = SweepScheduler(
                self.sweeper,
                interval_seconds=self.settings.sweeper.sweep_interval_seconds,
            )
            self.scheduler.start()

        self._started = True
        logger.info("Outbox sweeper started")

    async def stop(self) -> None:
        """Stop the scheduler, wait for running sweeps, then release resources."""
        if not self._started:
            return

        logger.info("Stopping outbox sweeper")
        if self.scheduler is not None:
            await self.scheduler.stop()
            self.scheduler = None

        await self._close_resources()
        self.sweeper = None
        self._started = False
        logger.info("Outbox sweeper stopped")

    async def _close_resources(self) -> None:
        await self.aws_clients.shutdown()
        if self._engine is not None and self._owns_engine:
            await dispose_engine(self._engine)
            self._engine = None

    @asynccontextmanager
    async def running(self, *, schedule: bool = True) -> AsyncIterator[SweeperService]:
        """Run the service for the duration of the ``async with`` block."""
        await self.start(schedule=schedule)
        try:
            yield self
        finally:
            await self.stop()


__all__ = ["SweeperService"]
