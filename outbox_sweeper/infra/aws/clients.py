"""Long-lived aioboto3 SQS and SNS clients.

Both clients are created once at startup from a single aioboto3 session and
shared by every sweep invocation. aiobotocore clients are async context
managers; they are entered in :meth:`AwsClients.startup` and exited in
:meth:`AwsClients.shutdown`.
"""

from __future__ import annotations

from contextlib import AsyncExitStack
import logging
from typing import TYPE_CHECKING, Any

import aioboto3
from botocore.config import Config

from outbox_sweeper.core.exceptions import SweeperError

if TYPE_CHECKING:
    from types import TracebackType

    from outbox_sweeper.core.settings.aws import AwsSettings

logger = logging.getLogger(__name__)


class AwsClients:
    """Holder for the shared SQS and SNS clients.

    Example:
        >>> clients = AwsClients(settings.aws)
        >>> await clients.startup()
        >>> await clients.sqs.send_message_batch(QueueUrl=url, Entries=entries)
        >>> await clients.shutdown()
    """

    def __init__(self, settings: AwsSettings, session: aioboto3.Session | None = None) -> None:
        """Initialize without opening any connection.

        Args:
            settings: AWS settings (region, endpoint, retry and timeouts).
            session: aioboto3 session to create clients from; a new one by default.
        """
        self.settings = settings
        self._session = session or aioboto3.Session()
        self._stack: AsyncExitStack | None = None
        self._sqs: Any = None
        self._sns: Any = None

    async def __aenter__(self) -> AwsClients:
        """Async context manager entry."""
        await self.startup()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.shutdown()

    def _boto_config(self) -> Config:
        return Config(
            retries={
                "max_attempts": self.settings.max_retries,
                "mode": self.settings.retry_mode,
            },
            connect_timeout=self.settings.connect_timeout,
            read_timeout=self.settings.read_timeout,
            max_pool_connections=self.settings.max_pool_connections,
        )

    async def startup(self) -> None:
        """Create and enter both clients.

        Called once during service startup.
        """
        if self._stack is not None:
            logger.debug("AWS clients already initialized")
            return

        client_config = self.settings.get_boto3_config()
        boto_config = self._boto_config()

        stack = AsyncExitStack()
        try:
            self._sqs = await stack.enter_async_context(
                self._session.client("sqs", **client_config, config=boto_config),
            )
            self._sns = await stack.enter_async_context(
                self._session.client("sns", **client_config, config=boto_config),
            )
        except Exception:
            await stack.aclose()
            self._sqs = self._sns = None
            raise
        self._stack = stack

        logger.info(
            "AWS clients initialized",
            extra={
                "region": self.settings.region,
                "endpoint": self.settings.endpoint_url,
                "max_retries": self.settings.max_retries,
                "retry_mode": self.settings.retry_mode,
            },
        )

    async def shutdown(self) -> None:
        """Close both clients and release their connection pools."""
        if self._stack is None:
            logger.debug("AWS clients not initialized, nothing to shutdown")
            return

        try:
            await self._stack.aclose()
            logger.info("AWS clients closed")
        except Exception:
            logger.exception("Error closing AWS clients")
        finally:
            self._stack = None
            self._sqs = self._sns = None

    @property
    def is_ready(self) -> bool:
        """Check if the clients are initialized."""
        return self._stack is not None

    @property
    def sqs(self) -> Any:
        """The shared SQS client."""
        if self._sqs is None:
            raise SweeperError("SQS client not initialized", code="AWS_CLIENT_NOT_READY")
        return self._sqs

    @property
    def sns(self) -> Any:
        """The shared SNS client."""
        if self._sns is None:
            raise SweeperError("SNS client not initialized", code="AWS_CLIENT_NOT_READY")
        return self._sns


__all__ = ["AwsClients"]
