"""Logging infrastructure.

Structured logging with:
- JSONL format for log aggregation
- Automatic context injection (sweep_id, topic) via contextvars
- QueueHandler + QueueListener for non-blocking I/O

Basic usage:
    from outbox_sweeper.infra.logging import log_context
    import logging

    logger = logging.getLogger(__name__)

    with log_context(topic="orders"):
        logger.info("Found messages to send", extra={"messages_found": 3})
"""

from outbox_sweeper.infra.logging.config import configure_logging, setup_logging, shutdown
from outbox_sweeper.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    log_context,
    set_log_context,
)
from outbox_sweeper.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
