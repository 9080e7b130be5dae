"""OutboxMessage SQLAlchemy model for the transactional outbox table.

Producers insert rows into ``core.outbox`` in the same transaction as their
business writes. The sweeper claims pending rows, delivers them to the
destination channel, and sets ``dispatched`` once delivery succeeded.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from outbox_sweeper.infra.database.base import Base
from outbox_sweeper.infra.database.session import OUTBOX_SCHEMA


class OutboxMessage(Base):
    """One pending or dispatched outbox message.

    Attributes:
        id: Monotonic row id; internal ordering/locking key, never sent downstream
        message_id: Producer-assigned idempotency key, used as the batch entry id
        topic: Grouping key selecting a batch of related messages
            (stored as ``message_type``)
        channel_address: ``TYPE::address`` for fan-out topics, or a bare queue URL
        dispatched: When the message was delivered; NULL while pending.
            Set once and never changed afterwards.
        timestamp: When the producer inserted the row (dequeue order)
        body: Opaque payload forwarded verbatim
        trace_parent: W3C traceparent of the producing request, if any
    """

    __tablename__ = "outbox"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    message_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        comment="The id of the message",
    )
    topic: Mapped[str] = mapped_column(
        "message_type",
        String(1024),
        nullable=False,
        comment="The Type of message",
    )
    channel_address: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
        comment="Destination channel (queue URL or TYPE::address)",
    )
    dispatched: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="The time that the message was dispatched from the outbox",
    )
    timestamp: Mapped[datetime] = mapped_column(
        "timestamp",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="The time that this message was placed in the outbox",
    )
    body: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="The payload of the message",
    )
    trace_parent: Mapped[str | None] = mapped_column(
        String(55),
        nullable=True,
        default=None,
        comment="The Open Telemetry Parent Trace Id",
    )

    __table_args__ = (
        Index("idx_outbox_dispatched", "dispatched"),
        {"schema": OUTBOX_SCHEMA},
    )

    @property
    def is_dispatched(self) -> bool:
        """Check if the message has been delivered."""
        return self.dispatched is not None

    def __repr__(self) -> str:
        """Human-readable representation."""
        status = "dispatched" if self.is_dispatched else "pending"
        return (
            f"OutboxMessage("
            f"id={self.id}, "
            f"message_id={self.message_id!r}, "
            f"topic={self.topic!r}, "
            f"status={status}"
            f")"
        )


__all__ = ["OutboxMessage"]
