"""Sweep engine, scheduler and service lifecycle."""

from outbox_sweeper.sweeper.engine import OutboxSweeper, SweepResult, TopicOutcome, TopicStatus
from outbox_sweeper.sweeper.scheduler import SweepScheduler
from outbox_sweeper.sweeper.service import SweeperService

__all__ = [
    "OutboxSweeper",
    "SweepResult",
    "SweepScheduler",
    "SweeperService",
    "TopicOutcome",
    "TopicStatus",
]
