"""Custom logging formatters."""

from __future__ import annotations

from datetime import UTC, datetime
import json
import logging
from typing import Any

# Standard LogRecord attributes; anything else on a record came from extra=
_SKIP_KEYS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Structured JSON Lines (JSONL) formatter with UTC timestamps.

    Formats log records as one JSON object per line, ready for ingestion by
    log aggregation systems (CloudWatch Logs Insights, Loki, Elasticsearch).

    Features:
    - UTC timestamps in ISO 8601 format with millisecond precision
    - Automatic inclusion of context from ContextInjectingFilter
    - ``extra={...}`` fields copied to the top level
    - Exception stack traces in structured format
    - No newlines in JSON (ensures valid JSONL)

    Example output:
        ```json
        {"level": "INFO", "logger": "outbox_sweeper.sweeper.engine", "message": "Successfully sent and marked messages", "timestamp": "2025-01-01T00:00:00.123Z", "service": "outbox-sweeper", "topic": "orders", "messages_sent": 3}
        ```
    """

    def __init__(
        self,
        fmt_keys: dict[str, str] | None = None,
        static: dict[str, Any] | None = None,
    ) -> None:
        """Initialize JSON formatter.

        Args:
            fmt_keys: Mapping of output keys to LogRecord attributes.
                Default: {"level": "levelname", "logger": "name", "message": "message"}
            static: Static fields to include in every log record (e.g., {"service": "api"}).
        """
        super().__init__()
        self.fmt_keys = fmt_keys or {
            "level": "levelname",
            "logger": "name",
            "message": "message",
        }
        self.static = static or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single-line JSON string."""
        record.message = record.getMessage()

        data: dict[str, Any] = {
            k: getattr(record, v, None) for k, v in self.fmt_keys.items()
        }

        data["timestamp"] = (
            datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        elif record.exc_text:
            # QueueHandler.prepare() pre-renders exc_info into exc_text
            data["exception"] = record.exc_text

        if record.stack_info:
            data["stack_trace"] = record.stack_info

        if self.static:
            data.update(self.static)

        for key, value in record.__dict__.items():
            if key not in _SKIP_KEYS and key not in data:
                data[key] = value

        # json.dumps escapes embedded newlines, keeping one record per line
        return json.dumps(data, ensure_ascii=False, default=str)


__all__ = ["JSONFormatter"]
