"""Modular Pydantic Settings v2 configuration.

Settings follow 12-factor principles:
- Environment variables as the single source of truth (``.env`` for development)
- Modular settings by domain (app/db/aws/sweeper/logging)
- Immutable (frozen) settings models
- Loaded once at startup and passed explicitly to components

Import settings via the cached loader:
    from outbox_sweeper.core.settings import get_settings

    settings = get_settings()
    print(settings.db.pool_size)
    print(settings.sweeper.sweep_interval_ms)
"""

from __future__ import annotations

from .app import AppSettings
from .aws import AwsSettings
from .loader import get_logging_settings, get_settings, load_settings
from .logs import LoggingSettings
from .postgres import PostgresSettings
from .sweeper import MAX_BATCH_ENTRIES, SweeperSettings
from .unified import Settings

__all__ = [
    "MAX_BATCH_ENTRIES",
    "AppSettings",
    "AwsSettings",
    "LoggingSettings",
    "PostgresSettings",
    "Settings",
    "SweeperSettings",
    "get_logging_settings",
    "get_settings",
    "load_settings",
]
