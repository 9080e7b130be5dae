"""Logging configuration setup.

Provides production-ready logging configuration using:
- dictConfig for flexible configuration
- QueueHandler + QueueListener so log I/O never blocks the event loop
- ContextInjectingFilter for automatic context propagation (sweep_id, topic)
- All handlers behind the root logger (child loggers propagate)
- JSONL format for machine parsing
"""

from __future__ import annotations

import atexit
import copy
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from outbox_sweeper.infra.logging.context import ContextInjectingFilter
from outbox_sweeper.infra.logging.formatters import JSONFormatter

if TYPE_CHECKING:
    from outbox_sweeper.core.settings.logs import LoggingSettings

_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_queue_handler: QueueHandler | None = None
_LOGGING_INITIALIZED = False

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


class StructuredQueueHandler(QueueHandler):
    """QueueHandler that keeps message and traceback in separate fields.

    The stock ``prepare()`` folds the formatted traceback into the message,
    which would put stack traces inside the JSON ``message`` key.
    """

    _exc_formatter = logging.Formatter()

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        record = copy.copy(record)
        record.message = record.getMessage()
        record.msg = record.message
        record.args = None
        if record.exc_info:
            record.exc_text = self._exc_formatter.formatException(record.exc_info)
            record.exc_info = None
        return record


def shutdown() -> None:
    """Stop the QueueListener, flushing pending records.

    Registered with atexit; safe to call more than once.
    """
    global _log_queue, _listener, _queue_handler

    if _listener is not None:
        # stop() enqueues a sentinel and joins the listener thread
        _listener.stop()
        _listener = None

    if _queue_handler is not None:
        logging.getLogger().removeHandler(_queue_handler)
        _queue_handler = None

    _log_queue = None


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    service: str = "outbox-sweeper",
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        service: Service name added to every JSON record.
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from outbox_sweeper.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = {**settings_obj.to_logging_kwargs(), "service": service, **configure_kwargs}
    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    file_path: str | Path | None = None,
    json_logs: bool = True,
    console_enabled: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    include_uvicorn_access: bool = False,
    service: str = "outbox-sweeper",
) -> None:
    """Configure logging with dictConfig and the QueueHandler pattern.

    All handlers are attached to a QueueListener; the root logger gets a
    single QueueHandler and application loggers propagate up to it.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file_path: Path to log file. None disables file logging.
        json_logs: Enable JSONL (JSON Lines) structured logging.
        console_enabled: Enable console/stderr logging.
        include_context: Inject contextvars log context into records.
        capture_warnings: Forward Python warnings to logging system.
        file_max_bytes: Maximum log file size before rotation.
        file_backup_count: Number of rotated log files to keep.
        include_uvicorn_access: Keep uvicorn access logs (liveness probes).
        service: Service name added to every JSON record.

    Example:
        from outbox_sweeper.core.settings import get_logging_settings
        log_settings = get_logging_settings()
        configure_logging(**log_settings.to_logging_kwargs())
    """
    global _log_queue, _listener, _queue_handler

    # Reconfiguration replaces the previous listener
    shutdown()

    if capture_warnings:
        logging.captureWarnings(True)

    level = log_level.upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "root": {"level": level, "handlers": []},
            "loggers": {
                "uvicorn": {"level": level, "propagate": True, "handlers": []},
                "uvicorn.error": {"level": level, "propagate": True, "handlers": []},
                "uvicorn.access": {
                    "level": "INFO" if include_uvicorn_access else "WARNING",
                    "propagate": True,
                    "handlers": [],
                },
                "botocore": {"level": "WARNING"},
                "aiobotocore": {"level": "WARNING"},
                "apscheduler": {"level": "WARNING"},
                "sqlalchemy.engine.Engine": {"level": "WARNING"},
            },
        }
    )

    handlers = _build_handlers(
        json_logs=json_logs,
        console_enabled=console_enabled,
        file_path=Path(file_path) if file_path else None,
        file_max_bytes=file_max_bytes,
        file_backup_count=file_backup_count,
        service=service,
    )

    _log_queue = Queue()
    _queue_handler = StructuredQueueHandler(_log_queue)
    if include_context:
        # Runs in the emitting task, where the contextvars are visible
        _queue_handler.addFilter(ContextInjectingFilter())

    if handlers:
        _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
        _listener.start()
        atexit.register(shutdown)

    logging.getLogger().addHandler(_queue_handler)

    logger.debug(
        "Logging configured",
        extra={"log_level": level, "json_logs": json_logs, "file_path": str(file_path or "")},
    )


def _build_handlers(
    *,
    json_logs: bool,
    console_enabled: bool,
    file_path: Path | None,
    file_max_bytes: int,
    file_backup_count: int,
    service: str,
) -> list[logging.Handler]:
    """Create the handlers served by the QueueListener."""
    handlers: list[logging.Handler] = []

    def _formatter() -> logging.Formatter:
        if json_logs:
            return JSONFormatter(static={"service": service})
        return logging.Formatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATEFMT)

    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(_formatter())
        handlers.append(console_handler)

    if file_path:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(_formatter())
        handlers.append(file_handler)

    return handlers


__all__ = ["StructuredQueueHandler", "configure_logging", "setup_logging", "shutdown"]
