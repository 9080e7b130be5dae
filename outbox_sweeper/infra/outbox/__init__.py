"""Transactional outbox table access."""

from outbox_sweeper.infra.outbox.models import OutboxMessage
from outbox_sweeper.infra.outbox.repository import OutboxRepository

__all__ = ["OutboxMessage", "OutboxRepository"]
