"""Context management for structured logging.

Provides automatic context injection into log records using contextvars, so
that every record emitted while sweeping a topic carries ``sweep_id`` and
``topic`` without passing them to each log call.

This approach is:
- Async-safe: each asyncio task (one per sweep invocation) gets its own copy
- Implicit: no need to modify existing logging calls
- Compatible: works with standard Python logging
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
import logging
from typing import Any

# Each async task gets its own copy automatically
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Set logging context for the current async task.

    All subsequent log calls in this context will automatically include
    these fields in the log record.

    Args:
        **kwargs: Key-value pairs to add to logging context.

    Example:
        ```python
        set_log_context(sweep_id="5f1c...")
        logger.info("Checking outbox for pending messages")  # Includes sweep_id
        ```
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Clear all logging context for the current async task."""
    _log_context.set({})


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Temporarily extend the logging context.

    The previous context is restored on exit, so nested scopes (an
    invocation, then each topic inside it) do not leak into each other.

    Example:
        ```python
        with log_context(topic="orders"):
            logger.info("Found messages to send")  # Includes topic
        logger.info("Sweep complete")  # topic no longer attached
        ```
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    token = _log_context.set(current)
    try:
        yield
    finally:
        _log_context.reset(token)


class ContextInjectingFilter(logging.Filter):
    """Logging filter that injects the contextvars log context into records.

    Attach it to handlers (not loggers): logger-level filters do not run for
    records propagated from child loggers.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject context into log record.

        Args:
            record: The log record to enhance with context.

        Returns:
            True (always allow the record to be logged).
        """
        for key, value in _log_context.get().items():
            # Don't overwrite existing attributes
            if not hasattr(record, key):
                setattr(record, key, value)

        return True


__all__ = [
    "ContextInjectingFilter",
    "clear_log_context",
    "get_log_context",
    "log_context",
    "set_log_context",
]
