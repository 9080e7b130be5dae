"""Periodic sweep scheduling with APScheduler.

Every tick starts a sweep invocation as its own asyncio task and returns at
once, so a slow sweep never delays the next tick and invocations may overlap.
Overlapping invocations stay correct because batches are claimed with
``FOR UPDATE SKIP LOCKED``.

APScheduler cancels running coroutine jobs when it shuts down, so the sweeps
are tracked here rather than run as jobs: :meth:`SweepScheduler.stop` stops
the ticks first, then waits for every in-flight sweep to finish.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
import logging
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import (
    AsyncIOScheduler,  # type: ignore[import-untyped]
)
from apscheduler.triggers.interval import (
    IntervalTrigger,  # type: ignore[import-untyped]
)

from outbox_sweeper.core.exceptions import OutboxStoreError

if TYPE_CHECKING:
    from outbox_sweeper.sweeper.engine import OutboxSweeper, SweepResult

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "outbox_sweep"


class SweepScheduler:
    """Fires sweep invocations on a fixed interval.

    Example:
        >>> scheduler = SweepScheduler(sweeper, interval_seconds=5.0)
        >>> scheduler.start()  # inside a running event loop
        >>> ...
        >>> await scheduler.stop()
    """

    def __init__(
        self,
        sweeper: OutboxSweeper,
        interval_seconds: float,
        *,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            sweeper: Sweep engine to invoke on every tick
            interval_seconds: Seconds between ticks
            scheduler: APScheduler instance (a new UTC AsyncIOScheduler by default)
        """
        if interval_seconds <= 0:
            msg = f"interval_seconds must be positive, got {interval_seconds}"
            raise ValueError(msg)

        self.sweeper = sweeper
        self.interval_seconds = interval_seconds
        self._scheduler = scheduler or AsyncIOScheduler(
            timezone="UTC",
            job_defaults={
                "coalesce": True,  # Collapse missed ticks into one
                "max_instances": 1,
                "misfire_grace_time": None,
            },
        )
        self._tasks: set[asyncio.Task[None]] = set()
        self._stopping = False

    @property
    def running(self) -> bool:
        return self._scheduler.running

    @property
    def in_flight(self) -> int:
        """Number of sweep invocations currently running."""
        return len(self._tasks)

    def start(self) -> None:
        """Register the sweep job and start ticking.

        Must be called from a running event loop. The first tick fires
        immediately.
        """
        if self.running:
            logger.warning("Sweep scheduler already running")
            return

        self._stopping = False
        self._scheduler.add_job(
            func=self._tick,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=SWEEP_JOB_ID,
            name="Sweep the outbox",
            replace_existing=True,
            next_run_time=datetime.now(UTC),
        )
        self._scheduler.start()
        logger.info(
            "Sweep scheduler started",
            extra={"interval_seconds": self.interval_seconds},
        )

    async def stop(self) -> None:
        """Stop ticking and wait for in-flight sweeps to complete.

        Running sweeps are not cancelled and there is no timeout: a sweep
        that holds claimed rows always gets to commit or roll back.
        """
        # Ticks already handed to the executor return without launching
        self._stopping = True
        if self.running:
            self._scheduler.shutdown(wait=False)
            # AsyncIOScheduler may defer the actual shutdown to the event loop
            while self._scheduler.running:
                await asyncio.sleep(0)

        while self._tasks:
            logger.info(
                "Waiting for in-flight sweeps to finish",
                extra={"in_flight": len(self._tasks)},
            )
            await asyncio.gather(*self._tasks, return_exceptions=True)

        logger.info("Sweep scheduler stopped")

    async def _tick(self) -> None:
        if self._stopping:
            return
        self.launch()

    def launch(self) -> asyncio.Task[None]:
        """Start one sweep invocation in the background.

        Returns:
            The task running the invocation.
        """
        task = asyncio.create_task(self._run_sweep(), name="outbox-sweep")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_sweep(self) -> None:
        try:
            result: SweepResult = await self.sweeper.sweep()
        except OutboxStoreError as e:
            logger.error(
                "Sweep aborted, retrying on next tick",
                extra=e.to_log_extra(),
            )
            return
        except Exception:
            logger.exception("Sweep invocation failed, retrying on next tick")
            return

        if result.failed:
            logger.warning(
                "Sweep finished with failed topics",
                extra={
                    "sweep_id": result.sweep_id,
                    "failed_topics": [outcome.topic for outcome in result.failed],
                },
            )


__all__ = ["SWEEP_JOB_ID", "SweepScheduler"]
