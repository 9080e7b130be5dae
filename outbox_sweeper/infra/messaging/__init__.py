"""Channel routing and batch transports."""

from outbox_sweeper.infra.messaging.dispatchers import (
    Dispatcher,
    Dispatchers,
    QueueDispatcher,
    TopicDispatcher,
)
from outbox_sweeper.infra.messaging.router import ChannelKind, Route, route

__all__ = [
    "ChannelKind",
    "Dispatcher",
    "Dispatchers",
    "QueueDispatcher",
    "Route",
    "TopicDispatcher",
    "route",
]
