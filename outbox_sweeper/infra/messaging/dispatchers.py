"""Batch senders for SQS queues and SNS topics.

Both dispatchers share one contract: :meth:`Dispatcher.send_batch` delivers a
whole batch or raises :class:`DispatchError`. A batch counts as failed when
the call raises or when the service reports any entry under ``Failed``; there
is no per-entry retry, the rows stay pending and the next sweep resends them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import TYPE_CHECKING, Any, ClassVar

from botocore.exceptions import BotoCoreError, ClientError

from outbox_sweeper.core.exceptions import DispatchError
from outbox_sweeper.core.settings.sweeper import MAX_BATCH_ENTRIES
from outbox_sweeper.infra.aws.exceptions import map_boto_error
from outbox_sweeper.infra.messaging.router import ChannelKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from outbox_sweeper.infra.aws.clients import AwsClients
    from outbox_sweeper.infra.outbox.models import OutboxMessage

logger = logging.getLogger(__name__)

TRACEPARENT_ATTRIBUTE = "traceparent"


def _message_attributes(message: OutboxMessage) -> dict[str, Any]:
    if not message.trace_parent:
        return {}
    return {
        TRACEPARENT_ATTRIBUTE: {
            "DataType": "String",
            "StringValue": message.trace_parent,
        },
    }


class Dispatcher(ABC):
    """Base class for batch transports."""

    kind: ClassVar[ChannelKind]
    operation: ClassVar[str]

    def __init__(self, client: Any) -> None:
        """Initialize dispatcher.

        Args:
            client: aiobotocore client for the transport.
        """
        self.client = client

    @abstractmethod
    def build_entry(self, message: OutboxMessage) -> dict[str, Any]:
        """Build the request entry for one message."""

    @abstractmethod
    async def _send(self, address: str, entries: list[dict[str, Any]]) -> dict[str, Any]:
        """Issue the batch API call and return the raw response."""

    async def send_batch(self, address: str, messages: Sequence[OutboxMessage]) -> None:
        """Deliver all ``messages`` to ``address`` in a single API call.

        Args:
            address: Queue URL or topic ARN.
            messages: Messages to deliver, at most ``MAX_BATCH_ENTRIES``.

        Raises:
            DispatchError: If the batch is too large, the call fails, or any
                entry is reported as failed.
        """
        if not messages:
            return

        if len(messages) > MAX_BATCH_ENTRIES:
            raise DispatchError(
                f"Batch of {len(messages)} exceeds the maximum of {MAX_BATCH_ENTRIES} entries",
                kind=self.kind.value,
                address=address,
                code="BATCH_TOO_LARGE",
                extra={"batch_size": len(messages)},
            )

        entries = [self.build_entry(message) for message in messages]

        try:
            response = await self._send(address, entries)
        except (ClientError, BotoCoreError) as e:
            raise map_boto_error(
                e,
                kind=self.kind.value,
                address=address,
                operation=self.operation,
            ) from e

        failed = [
            {
                "id": entry.get("Id"),
                "code": entry.get("Code"),
                "message": entry.get("Message"),
                "sender_fault": entry.get("SenderFault"),
            }
            for entry in response.get("Failed") or []
        ]
        if failed:
            raise DispatchError(
                f"{self.operation} rejected {len(failed)} of {len(entries)} entries",
                kind=self.kind.value,
                address=address,
                failed=failed,
                code="PARTIAL_BATCH_FAILURE",
            )

        logger.debug(
            "Batch delivered",
            extra={
                "channel_kind": self.kind.value,
                "address": address,
                "entries": len(entries),
            },
        )


class QueueDispatcher(Dispatcher):
    """Sends batches to an SQS queue with ``SendMessageBatch``."""

    kind = ChannelKind.QUEUE
    operation = "SendMessageBatch"

    def build_entry(self, message: OutboxMessage) -> dict[str, Any]:
        entry: dict[str, Any] = {"Id": message.message_id, "MessageBody": message.body}
        attributes = _message_attributes(message)
        if attributes:
            entry["MessageAttributes"] = attributes
        return entry

    async def _send(self, address: str, entries: list[dict[str, Any]]) -> dict[str, Any]:
        return await self.client.send_message_batch(QueueUrl=address, Entries=entries)


class TopicDispatcher(Dispatcher):
    """Publishes batches to an SNS topic with ``PublishBatch``."""

    kind = ChannelKind.TOPIC
    operation = "PublishBatch"

    def build_entry(self, message: OutboxMessage) -> dict[str, Any]:
        entry: dict[str, Any] = {"Id": message.message_id, "Message": message.body}
        attributes = _message_attributes(message)
        if attributes:
            entry["MessageAttributes"] = attributes
        return entry

    async def _send(self, address: str, entries: list[dict[str, Any]]) -> dict[str, Any]:
        return await self.client.publish_batch(TopicArn=address, PublishBatchRequestEntries=entries)


class Dispatchers:
    """Selects the dispatcher for a channel kind."""

    def __init__(self, queue: Dispatcher, topic: Dispatcher) -> None:
        self._by_kind: dict[ChannelKind, Dispatcher] = {
            ChannelKind.QUEUE: queue,
            ChannelKind.TOPIC: topic,
        }

    @classmethod
    def from_clients(cls, clients: AwsClients) -> Dispatchers:
        """Build both dispatchers over the shared, started AWS clients."""
        return cls(queue=QueueDispatcher(clients.sqs), topic=TopicDispatcher(clients.sns))

    def for_kind(self, kind: ChannelKind) -> Dispatcher:
        return self._by_kind[kind]


__all__ = [
    "TRACEPARENT_ATTRIBUTE",
    "Dispatcher",
    "Dispatchers",
    "QueueDispatcher",
    "TopicDispatcher",
]
