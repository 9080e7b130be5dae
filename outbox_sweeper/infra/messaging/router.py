"""Channel address routing.

A channel address is either ``TYPE::address`` (fan-out topic, e.g.
``SNS::arn:aws:sns:eu-west-1:123456789012:orders``) or a bare queue URL
(``https://sqs.eu-west-1.amazonaws.com/123456789012/orders``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

CHANNEL_SEPARATOR = "::"
SNS_PREFIX = "SNS"


class ChannelKind(StrEnum):
    """Transport kinds a message can be delivered through."""

    QUEUE = "queue"
    TOPIC = "topic"


@dataclass(frozen=True, slots=True)
class Route:
    """Resolved destination of a channel address.

    Attributes:
        kind: Transport to deliver through.
        address: Physical address passed to the transport (queue URL or topic ARN).
        label: Type prefix as written in the channel address, None for bare queue URLs.
    """

    kind: ChannelKind
    address: str
    label: str | None = None


def route(channel_address: str) -> Route:
    """Resolve a channel address into a transport kind and physical address.

    The address is split on the first ``::``. Any prefix selects the fan-out
    topic transport, with ``SNS`` being the one recognised by name; the prefix
    is kept as the route label. Without a separator the whole string is a
    queue URL.

    Args:
        channel_address: Address stored on the outbox row.

    Returns:
        The resolved route.
    """
    prefix, sep, remainder = channel_address.partition(CHANNEL_SEPARATOR)
    if not sep:
        return Route(kind=ChannelKind.QUEUE, address=channel_address)
    return Route(kind=ChannelKind.TOPIC, address=remainder, label=prefix)


def is_known_prefix(label: str | None) -> bool:
    """Check whether a route label names a transport this service knows."""
    return label is None or label.upper() == SNS_PREFIX


__all__ = [
    "CHANNEL_SEPARATOR",
    "SNS_PREFIX",
    "ChannelKind",
    "Route",
    "is_known_prefix",
    "route",
]
