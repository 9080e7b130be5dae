"""Repository for the outbox table.

Provides methods for:
- Discovering topics with pending messages
- Claiming a batch of pending messages under row locks
- Marking delivered messages as dispatched
- Counting the backlog for monitoring

Every method runs inside the caller's session so that claim, delivery and
mark share one transaction. Database failures are raised as
:class:`OutboxStoreError`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from outbox_sweeper.core.exceptions import OutboxStoreError
from outbox_sweeper.infra.metrics.prometheus import outbox_store_errors_total
from outbox_sweeper.infra.outbox.models import OutboxMessage

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


def _store_error(operation: str, exc: SQLAlchemyError, topic: str | None = None) -> OutboxStoreError:
    outbox_store_errors_total.labels(operation=operation).inc()
    return OutboxStoreError(
        f"Outbox {operation} failed: {exc.__class__.__name__}",
        operation=operation,
        topic=topic,
        extra={"exception_type": type(exc).__name__},
    )


class OutboxRepository:
    """Data access for ``core.outbox``.

    Stateless; a single instance is shared by all sweeps.
    """

    async def list_pending_topics(self, session: AsyncSession) -> set[str]:
        """Return the distinct topics that have at least one pending message.

        Args:
            session: Database session

        Returns:
            Set of topics; empty when nothing is pending
        """
        stmt = select(OutboxMessage.topic).where(OutboxMessage.dispatched.is_(None)).distinct()
        try:
            result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise _store_error("list_pending_topics", exc) from exc
        return set(result.scalars().all())

    async def claim_batch(
        self,
        session: AsyncSession,
        topic: str,
        limit: int,
    ) -> Sequence[OutboxMessage]:
        """Lock and return up to ``limit`` pending messages for ``topic``.

        Messages are returned oldest first (by ``timestamp``, then ``id``).
        Rows already locked by another transaction are skipped, so concurrent
        sweeps claim disjoint batches. The locks are held until the session's
        transaction ends.

        Args:
            session: Database session with an open transaction
            topic: Topic to claim from
            limit: Maximum number of messages to claim

        Returns:
            Claimed messages, possibly empty
        """
        stmt = (
            select(OutboxMessage)
            .where(
                OutboxMessage.dispatched.is_(None),
                OutboxMessage.topic == topic,
            )
            .order_by(OutboxMessage.timestamp.asc(), OutboxMessage.id.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        try:
            result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise _store_error("claim_batch", exc, topic) from exc
        return result.scalars().all()

    async def mark_dispatched(self, session: AsyncSession, ids: Sequence[int]) -> int:
        """Set ``dispatched`` to the current time for the given message ids.

        Rows that are already dispatched are left untouched, so the first
        dispatch time is never overwritten.

        Args:
            session: Database session holding the claim
            ids: Row ids of the delivered messages

        Returns:
            Number of rows updated
        """
        if not ids:
            return 0

        stmt = (
            update(OutboxMessage)
            .where(
                OutboxMessage.id.in_(list(ids)),
                OutboxMessage.dispatched.is_(None),
            )
            .values(dispatched=func.now())
            .execution_options(synchronize_session=False)
        )
        try:
            result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise _store_error("mark_dispatched", exc) from exc
        return result.rowcount

    async def count_pending(self, session: AsyncSession, topic: str | None = None) -> int:
        """Count messages waiting to be dispatched.

        Args:
            session: Database session
            topic: Restrict the count to one topic

        Returns:
            Number of pending messages
        """
        stmt = select(func.count()).select_from(OutboxMessage).where(OutboxMessage.dispatched.is_(None))
        if topic is not None:
            stmt = stmt.where(OutboxMessage.topic == topic)
        try:
            result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise _store_error("count_pending", exc, topic) from exc
        return result.scalar_one()

    async def pending_by_topic(self, session: AsyncSession) -> dict[str, int]:
        """Return the pending backlog grouped by topic."""
        stmt = (
            select(OutboxMessage.topic, func.count())
            .where(OutboxMessage.dispatched.is_(None))
            .group_by(OutboxMessage.topic)
            .order_by(OutboxMessage.topic)
        )
        try:
            result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise _store_error("pending_by_topic", exc) from exc
        return {topic: count for topic, count in result.all()}


__all__ = ["OutboxRepository"]
