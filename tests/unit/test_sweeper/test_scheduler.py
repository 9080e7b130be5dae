"""Unit tests for SweepScheduler."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
import pytest

from outbox_sweeper.core.exceptions import OutboxStoreError
from outbox_sweeper.sweeper.engine import SweepResult, TopicOutcome, TopicStatus
from outbox_sweeper.sweeper.scheduler import SWEEP_JOB_ID, SweepScheduler

SCHEDULER_LOGGER = "outbox_sweeper.sweeper.scheduler"


class FakeSweeper:
    """Sweeper whose invocations block until released."""

    def __init__(self, result: SweepResult | None = None, error: Exception | None = None):
        self.result = result or SweepResult(sweep_id="sweep-1")
        self.error = error
        self.calls = 0
        self.called = asyncio.Event()
        self.release = asyncio.Event()
        self.release.set()
        self.finished = 0

    async def sweep(self) -> SweepResult:
        self.calls += 1
        self.called.set()
        await self.release.wait()
        if self.error is not None:
            raise self.error
        self.finished += 1
        return self.result


@pytest.mark.unit
class TestSweepScheduler:
    """Test suite for SweepScheduler."""

    def test_invalid_interval(self):
        with pytest.raises(ValueError, match="interval_seconds"):
            SweepScheduler(FakeSweeper(), interval_seconds=0)

    async def test_start_registers_job_and_fires_immediately(self):
        """Test that the first sweep runs without waiting a full interval."""
        sweeper = FakeSweeper()
        apscheduler = AsyncIOScheduler(timezone="UTC")
        scheduler = SweepScheduler(sweeper, interval_seconds=3600, scheduler=apscheduler)

        scheduler.start()
        try:
            assert scheduler.running
            job = apscheduler.get_job(SWEEP_JOB_ID)
            assert job is not None
            assert job.trigger.interval.total_seconds() == 3600

            await asyncio.wait_for(sweeper.called.wait(), timeout=5)
        finally:
            await scheduler.stop()

        assert not scheduler.running
        assert sweeper.calls == 1

    async def test_no_sweep_after_stop_returns(self):
        """Test that a tick due during shutdown does not launch a sweep."""
        sweeper = FakeSweeper()
        apscheduler = AsyncIOScheduler(timezone="UTC")
        scheduler = SweepScheduler(sweeper, interval_seconds=3600, scheduler=apscheduler)
        scheduler.start()
        await asyncio.wait_for(sweeper.called.wait(), timeout=5)
        while scheduler.in_flight:
            await asyncio.sleep(0.01)

        apscheduler.get_job(SWEEP_JOB_ID).modify(next_run_time=datetime.now(UTC))
        await asyncio.sleep(0)
        await scheduler.stop()

        assert not scheduler.running
        assert scheduler.in_flight == 0
        await asyncio.sleep(0.2)
        assert sweeper.calls == 1
        assert scheduler.in_flight == 0

    async def test_start_twice_is_noop(self):
        apscheduler = AsyncIOScheduler(timezone="UTC")
        scheduler = SweepScheduler(FakeSweeper(), interval_seconds=3600, scheduler=apscheduler)

        scheduler.start()
        try:
            scheduler.start()
            assert len(apscheduler.get_jobs()) == 1
        finally:
            await scheduler.stop()

    async def test_launch_tracks_task(self):
        sweeper = FakeSweeper()
        sweeper.release.clear()
        scheduler = SweepScheduler(sweeper, interval_seconds=1)

        task = scheduler.launch()
        await sweeper.called.wait()
        assert scheduler.in_flight == 1

        sweeper.release.set()
        await task
        await asyncio.sleep(0)
        assert scheduler.in_flight == 0

    async def test_invocations_may_overlap(self):
        """Test that a slow sweep does not block the next one."""
        sweeper = FakeSweeper()
        sweeper.release.clear()
        scheduler = SweepScheduler(sweeper, interval_seconds=1)

        scheduler.launch()
        scheduler.launch()
        await asyncio.sleep(0)

        assert sweeper.calls == 2
        assert scheduler.in_flight == 2
        sweeper.release.set()
        await scheduler.stop()

    async def test_stop_waits_for_in_flight_sweeps(self):
        """Test that stop lets a running sweep finish instead of cancelling it."""
        sweeper = FakeSweeper()
        sweeper.release.clear()
        scheduler = SweepScheduler(sweeper, interval_seconds=1)
        task = scheduler.launch()
        await sweeper.called.wait()

        stopping = asyncio.create_task(scheduler.stop())
        await asyncio.sleep(0.01)
        assert not stopping.done()

        sweeper.release.set()
        await stopping

        assert sweeper.finished == 1
        assert task.done()
        assert not task.cancelled()
        assert scheduler.in_flight == 0

    async def test_store_error_logged_not_raised(self, caplog: pytest.LogCaptureFixture):
        """Test that an aborted sweep is logged and retried on the next tick."""
        error = OutboxStoreError("Outbox list_pending_topics failed", operation="list_pending_topics")
        scheduler = SweepScheduler(FakeSweeper(error=error), interval_seconds=1)

        with caplog.at_level(logging.ERROR, logger=SCHEDULER_LOGGER):
            await scheduler.launch()

        assert any("Sweep aborted" in r.getMessage() for r in caplog.records)

    async def test_unexpected_error_logged_not_raised(self, caplog: pytest.LogCaptureFixture):
        scheduler = SweepScheduler(FakeSweeper(error=RuntimeError("boom")), interval_seconds=1)

        with caplog.at_level(logging.ERROR, logger=SCHEDULER_LOGGER):
            await scheduler.launch()

        (record,) = [r for r in caplog.records if r.name == SCHEDULER_LOGGER]
        assert record.exc_info is not None

    async def test_failed_topics_warned(self, caplog: pytest.LogCaptureFixture):
        result = SweepResult(
            sweep_id="sweep-2",
            outcomes=[
                TopicOutcome(topic="orders", status=TopicStatus.FAILED),
                TopicOutcome(topic="invoices", status=TopicStatus.DISPATCHED),
            ],
        )
        scheduler = SweepScheduler(FakeSweeper(result=result), interval_seconds=1)

        with caplog.at_level(logging.WARNING, logger=SCHEDULER_LOGGER):
            await scheduler.launch()

        (record,) = [r for r in caplog.records if r.name == SCHEDULER_LOGGER]
        assert record.failed_topics == ["orders"]

    async def test_stop_when_idle(self):
        scheduler = SweepScheduler(FakeSweeper(), interval_seconds=1)

        await scheduler.stop()

        assert scheduler.in_flight == 0
