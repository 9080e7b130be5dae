"""Application lifespan management.

The liveness server hosts the sweeper: the service is started when uvicorn
starts the application and stopped when uvicorn receives SIGINT/SIGTERM, so
shutdown waits for in-flight sweeps before the process exits.

Startup Order:
1. Logging
2. Database engine (connection checked)
3. AWS clients
4. Sweep scheduler

Shutdown Order: Reverse of startup
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from outbox_sweeper.infra.logging.config import setup_logging
from outbox_sweeper.sweeper.service import SweeperService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the sweeper service for the lifetime of the application."""
    settings = app.state.settings
    # Replaces the CLI bootstrap config, which ran before settings were loaded
    setup_logging(settings.logging, service=settings.app.service_name, force=True)

    service = getattr(app.state, "service", None)
    if service is None:
        service = SweeperService(settings)
        app.state.service = service

    await service.start()
    logger.info(
        "Liveness endpoint ready",
        extra={"host": settings.app.host, "port": settings.app.port},
    )
    try:
        yield
    finally:
        await service.stop()
