"""Custom exception classes for the outbox sweeper.

Every error raised by the sweeper derives from :class:`SweeperError`, which
carries a human-readable message, a stable error code and an ``extra`` dict of
context that log statements can pass straight through as ``extra=``.

Hierarchy:
    SweeperError
    ├── ConfigurationError   (fatal at startup)
    ├── OutboxStoreError     (database access failed)
    └── DispatchError        (transport rejected or failed a batch)
"""

from __future__ import annotations

from typing import Any


class SweeperError(Exception):
    """Base sweeper exception.

    Attributes:
        message: Human-readable error message.
        code: Error code identifier for programmatic handling.
        extra: Additional context-specific information about the error.

    Example:
        raise SweeperError(
            "Outbox sweep failed",
            code="SWEEP_FAILED",
            extra={"topic": "orders"},
        )
    """

    default_code = "SWEEPER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize sweeper exception.

        Args:
            message: Human-readable error message.
            code: Error code; defaults to the class ``default_code``.
            extra: Additional context about the error.
        """
        self.message = message
        self.code = code or self.default_code
        self.extra = extra or {}
        super().__init__(message)

    def to_log_extra(self) -> dict[str, Any]:
        """Flatten the error into a dict suitable for ``logger.*(extra=...)``."""
        return {"error": self.message, "error_code": self.code, **self.extra}


class ConfigurationError(SweeperError):
    """Raised when required settings are missing or invalid.

    Example:
        raise ConfigurationError(
            "Missing required configuration: DATABASE_URL",
            extra={"missing": ["DATABASE_URL"]},
        )
    """

    default_code = "CONFIGURATION_ERROR"


class OutboxStoreError(SweeperError):
    """Raised when reading or writing the outbox table fails."""

    default_code = "OUTBOX_STORE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        topic: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize store error.

        Args:
            message: Human-readable error message.
            operation: Store operation that failed (e.g. "claim_batch").
            topic: Topic being processed, if any.
            extra: Additional context about the error.
        """
        self.operation = operation
        self.topic = topic
        context: dict[str, Any] = {"operation": operation}
        if topic is not None:
            context["topic"] = topic
        super().__init__(message, extra={**context, **(extra or {})})


class DispatchError(SweeperError):
    """Raised when a transport fails to deliver a whole batch.

    A batch is all-or-nothing: partial rejections reported by the remote
    service are raised as a ``DispatchError`` listing the failed entries.

    Attributes:
        kind: Transport kind ("queue" or "topic").
        address: Physical destination address.
        failed: Failed entries as reported by the service, one dict per entry
            with ``id``, ``code`` and ``message`` keys.
    """

    default_code = "DISPATCH_ERROR"

    def __init__(
        self,
        message: str,
        *,
        kind: str,
        address: str,
        failed: list[dict[str, Any]] | None = None,
        code: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dispatch error.

        Args:
            message: Human-readable error message.
            kind: Transport kind.
            address: Physical destination address.
            failed: Failed entries reported by the remote service.
            code: Error code (e.g. the AWS error code).
            extra: Additional context about the error.
        """
        self.kind = kind
        self.address = address
        self.failed = failed or []
        context: dict[str, Any] = {"channel_kind": kind, "address": address}
        if self.failed:
            context["failed_entries"] = self.failed
        super().__init__(message, code=code, extra={**context, **(extra or {})})


__all__ = [
    "ConfigurationError",
    "DispatchError",
    "OutboxStoreError",
    "SweeperError",
]
