"""Translation of botocore errors into sweeper exceptions."""

from __future__ import annotations

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from outbox_sweeper.core.exceptions import DispatchError


def map_boto_error(
    error: ClientError | BotoCoreError,
    *,
    kind: str,
    address: str,
    operation: str,
) -> DispatchError:
    """Map a botocore error to a :class:`DispatchError`.

    Args:
        error: The botocore exception raised by the client call.
        kind: Transport kind ("queue" or "topic").
        address: Queue URL or topic ARN the call targeted.
        operation: AWS operation name (e.g. "SendMessageBatch").

    Returns:
        DispatchError carrying the AWS error code and request id when the
        service answered, or the botocore error class otherwise.

    Example:
        ```python
        try:
            await sqs.send_message_batch(QueueUrl=url, Entries=entries)
        except (ClientError, BotoCoreError) as e:
            raise map_boto_error(e, kind="queue", address=url, operation="SendMessageBatch") from e
        ```
    """
    extra: dict[str, Any] = {"operation": operation}

    if isinstance(error, ClientError):
        error_info = error.response.get("Error", {})
        error_code = error_info.get("Code", "Unknown")
        error_message = error_info.get("Message", str(error))
        extra["aws_error_code"] = error_code
        extra["request_id"] = error.response.get("ResponseMetadata", {}).get("RequestId")
        return DispatchError(
            f"{operation} failed: {error_message}",
            kind=kind,
            address=address,
            code=error_code,
            extra=extra,
        )

    # Connection/endpoint/credential problems never reached the service
    return DispatchError(
        f"{operation} failed: {error}",
        kind=kind,
        address=address,
        code=type(error).__name__,
        extra=extra,
    )


__all__ = ["map_boto_error"]
