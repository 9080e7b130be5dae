"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from outbox_sweeper.app.health import router as health_router
from outbox_sweeper.app.lifespan import lifespan
from outbox_sweeper.core.settings import get_settings

if TYPE_CHECKING:
    from outbox_sweeper.core.settings import Settings
    from outbox_sweeper.sweeper.service import SweeperService


def create_app(
    settings: Settings | None = None,
    *,
    service: SweeperService | None = None,
) -> FastAPI:
    """Create the liveness application hosting the sweeper.

    Args:
        settings: Loaded settings; cached settings from the environment by default.
        service: Sweeper service to run; built from ``settings`` at startup by default.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    app_settings = settings.app

    app = FastAPI(
        title=app_settings.service_name,
        version=app_settings.version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service

    app.include_router(health_router)

    return app
