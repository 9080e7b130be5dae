"""Unified settings composition.

Composes all domain settings into a single immutable object that is built
once at startup and handed to the scheduler, the store and the dispatchers.

Usage:
    from outbox_sweeper.core.settings import get_settings

    settings = get_settings()
    print(settings.sweeper.batch_size)
    print(settings.aws.region)
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from .app import AppSettings
from .aws import AwsSettings
from .logs import LoggingSettings
from .postgres import PostgresSettings
from .sweeper import SweeperSettings


class Settings(BaseModel):
    """All sweeper settings, grouped by domain."""

    app: AppSettings
    db: PostgresSettings
    aws: AwsSettings
    sweeper: SweeperSettings
    logging: LoggingSettings

    model_config = ConfigDict(frozen=True)

    def to_safe_dict(self) -> dict[str, Any]:
        """Dump settings with secrets masked, for display and logs."""
        data = self.model_dump(mode="json")
        data["db"]["url"] = self.db.masked_url
        return data
