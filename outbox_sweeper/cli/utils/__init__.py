"""CLI utilities for running async operations and formatting output."""

from outbox_sweeper.cli.utils.async_runner import coro
from outbox_sweeper.cli.utils.formatters import error, info, key_values, success, warning

__all__ = [
    "coro",
    "error",
    "info",
    "key_values",
    "success",
    "warning",
]
