"""Sweep engine: drains pending outbox messages into their channels.

One sweep invocation:
1. Lists the topics that have pending messages
2. For each topic, in its own transaction: claims a locked batch, routes the
   batch by the first message's channel address, dispatches it, and marks the
   rows dispatched only after delivery succeeded
3. Returns a :class:`SweepResult` with one :class:`TopicOutcome` per topic

A failure on one topic never stops the others. Delivery is at-least-once: when
a batch is delivered but the mark cannot be committed, the rows stay pending
and are delivered again by a later sweep.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import logging
import time
from typing import TYPE_CHECKING
import uuid

from sqlalchemy.exc import SQLAlchemyError

from outbox_sweeper.core.exceptions import DispatchError, OutboxStoreError
from outbox_sweeper.core.settings.sweeper import MAX_BATCH_ENTRIES
from outbox_sweeper.infra.logging.context import log_context
from outbox_sweeper.infra.messaging.router import ChannelKind, is_known_prefix, route
from outbox_sweeper.infra.metrics.prometheus import (
    outbox_dispatch_failures_total,
    outbox_mark_failures_total,
    outbox_messages_dispatched_total,
    outbox_sweep_duration_seconds,
    outbox_sweeps_in_flight,
    outbox_sweeps_total,
)
from outbox_sweeper.infra.outbox.repository import OutboxRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from outbox_sweeper.infra.messaging.dispatchers import Dispatchers

logger = logging.getLogger(__name__)


class TopicStatus(StrEnum):
    """How a topic fared in one sweep."""

    EMPTY = "empty"
    DISPATCHED = "dispatched"
    FAILED = "failed"
    MARK_FAILED = "mark_failed"
    STORE_ERROR = "store_error"


@dataclass(frozen=True, slots=True)
class TopicOutcome:
    """Result of sweeping a single topic.

    Attributes:
        topic: Topic that was swept
        status: What happened to the claimed batch
        messages_found: Number of messages claimed
        messages_dispatched: Number of messages delivered and marked
        kind: Transport the batch was routed to, if it got that far
        address: Physical destination address, if routed
        error: Error message for failed outcomes
    """

    topic: str
    status: TopicStatus
    messages_found: int = 0
    messages_dispatched: int = 0
    kind: ChannelKind | None = None
    address: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in {TopicStatus.EMPTY, TopicStatus.DISPATCHED}


@dataclass(slots=True)
class SweepResult:
    """Aggregated result of one sweep invocation."""

    sweep_id: str
    outcomes: list[TopicOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def topics(self) -> list[str]:
        return [outcome.topic for outcome in self.outcomes]

    @property
    def messages_found(self) -> int:
        return sum(outcome.messages_found for outcome in self.outcomes)

    @property
    def messages_dispatched(self) -> int:
        return sum(outcome.messages_dispatched for outcome in self.outcomes)

    @property
    def failed(self) -> list[TopicOutcome]:
        """Outcomes whose batch was left pending."""
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


class OutboxSweeper:
    """Runs sweep invocations over the shared pool and AWS clients.

    The sweeper keeps no state between invocations, so any number of
    invocations can run concurrently; row locks taken with SKIP LOCKED keep
    their batches disjoint.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dispatchers: Dispatchers,
        *,
        batch_size: int = MAX_BATCH_ENTRIES,
        repository: OutboxRepository | None = None,
    ) -> None:
        """Initialize the sweeper.

        Args:
            session_factory: Factory for sessions on the shared engine
            dispatchers: Queue and topic dispatchers
            batch_size: Maximum messages claimed per topic per sweep
            repository: Outbox repository (a new one by default)
        """
        if not 1 <= batch_size <= MAX_BATCH_ENTRIES:
            msg = f"batch_size must be between 1 and {MAX_BATCH_ENTRIES}, got {batch_size}"
            raise ValueError(msg)

        self.batch_size = batch_size
        self._session_factory = session_factory
        self._dispatchers = dispatchers
        self._repository = repository or OutboxRepository()

    async def sweep(self) -> SweepResult:
        """Run one sweep invocation over every topic with pending messages.

        Returns:
            Per-topic outcomes of this invocation.

        Raises:
            OutboxStoreError: If the pending topics could not be listed.
        """
        result = SweepResult(sweep_id=uuid.uuid4().hex)
        start = time.perf_counter()
        outbox_sweeps_in_flight.inc()

        with log_context(sweep_id=result.sweep_id):
            try:
                logger.debug("Checking outbox for pending messages")
                topics = await self._list_pending_topics()

                for topic in sorted(topics):
                    result.outcomes.append(await self._sweep_topic_contained(topic))
            except OutboxStoreError:
                outbox_sweeps_total.labels(status="aborted").inc()
                raise
            finally:
                result.duration_seconds = time.perf_counter() - start
                outbox_sweep_duration_seconds.observe(result.duration_seconds)
                outbox_sweeps_in_flight.dec()

            outbox_sweeps_total.labels(status="ok").inc()
            if result.outcomes:
                logger.info(
                    "Outbox sweep complete",
                    extra={
                        "topics": len(result.outcomes),
                        "messages_found": result.messages_found,
                        "messages_dispatched": result.messages_dispatched,
                        "failed_topics": [outcome.topic for outcome in result.failed],
                        "duration_seconds": round(result.duration_seconds, 4),
                    },
                )
            else:
                logger.debug("No pending outbox messages")

        return result

    async def _list_pending_topics(self) -> set[str]:
        async with self._session_factory() as session:
            return await self._repository.list_pending_topics(session)

    async def _sweep_topic_contained(self, topic: str) -> TopicOutcome:
        try:
            return await self.sweep_topic(topic)
        except Exception as e:
            logger.exception("Unexpected error sweeping outbox topic", extra={"topic": topic})
            return TopicOutcome(topic=topic, status=TopicStatus.FAILED, error=str(e))

    async def sweep_topic(self, topic: str) -> TopicOutcome:
        """Claim, dispatch and mark one batch of ``topic``.

        The claim, the delivery and the mark share one transaction. The batch
        is marked and committed only after the transport accepted every entry;
        otherwise the transaction is rolled back and the rows stay pending.

        Args:
            topic: Topic to sweep

        Returns:
            Outcome of the topic.
        """
        with log_context(topic=topic):
            async with self._session_factory() as session:
                try:
                    messages = await self._repository.claim_batch(session, topic, self.batch_size)
                except OutboxStoreError as e:
                    logger.error("Failed to claim outbox batch", extra=e.to_log_extra())
                    return TopicOutcome(topic=topic, status=TopicStatus.STORE_ERROR, error=e.message)

                if not messages:
                    # Every pending row is held by a concurrent sweep
                    logger.debug("No claimable messages")
                    return TopicOutcome(topic=topic, status=TopicStatus.EMPTY)

                found = len(messages)
                channel_address = messages[0].channel_address
                other_addresses = {m.channel_address for m in messages} - {channel_address}
                if other_addresses:
                    logger.warning(
                        "Batch spans multiple channel addresses, delivering all to the first",
                        extra={
                            "channel_address": channel_address,
                            "ignored_addresses": sorted(other_addresses),
                        },
                    )

                destination = route(channel_address)
                if not is_known_prefix(destination.label):
                    logger.warning(
                        "Unrecognised channel type prefix, delivering as topic",
                        extra={"channel_type": destination.label},
                    )

                log_extra = {
                    "channel_kind": destination.kind.value,
                    "address": destination.address,
                    "messages_found": found,
                }
                logger.debug("Found messages to send", extra=log_extra)

                dispatcher = self._dispatchers.for_kind(destination.kind)
                try:
                    await dispatcher.send_batch(destination.address, messages)
                except DispatchError as e:
                    await session.rollback()
                    outbox_dispatch_failures_total.labels(
                        topic=topic,
                        kind=destination.kind.value,
                    ).inc()
                    logger.error(
                        "Failed to send messages, they stay pending",
                        extra={**log_extra, **e.to_log_extra()},
                    )
                    return TopicOutcome(
                        topic=topic,
                        status=TopicStatus.FAILED,
                        messages_found=found,
                        kind=destination.kind,
                        address=destination.address,
                        error=e.message,
                    )

                try:
                    await self._repository.mark_dispatched(session, [m.id for m in messages])
                    await session.commit()
                except (OutboxStoreError, SQLAlchemyError) as e:
                    outbox_mark_failures_total.labels(topic=topic).inc()
                    logger.error(
                        "Error marking messages as dispatched. These messages WILL be re-sent.",
                        extra={**log_extra, "error": str(e)},
                    )
                    return TopicOutcome(
                        topic=topic,
                        status=TopicStatus.MARK_FAILED,
                        messages_found=found,
                        kind=destination.kind,
                        address=destination.address,
                        error=str(e),
                    )

            outbox_messages_dispatched_total.labels(
                topic=topic,
                kind=destination.kind.value,
            ).inc(found)
            logger.info("Successfully sent and marked messages.", extra=log_extra)
            return TopicOutcome(
                topic=topic,
                status=TopicStatus.DISPATCHED,
                messages_found=found,
                messages_dispatched=found,
                kind=destination.kind,
                address=destination.address,
            )


__all__ = [
    "OutboxSweeper",
    "SweepResult",
    "TopicOutcome",
    "TopicStatus",
]
