"""Sweep loop settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# SQS SendMessageBatch and SNS PublishBatch both accept at most 10 entries.
MAX_BATCH_ENTRIES = 10


class SweeperSettings(BaseSettings):
    """Scheduler period and per-topic batch limit.

    Example: SWEEP_INTERVAL_MS=5000, BATCH_SIZE=10
    """

    sweep_interval_ms: int = Field(
        default=5000,
        ge=10,
        le=3_600_000,
        description="Milliseconds between sweep invocations",
    )

    batch_size: int = Field(
        default=MAX_BATCH_ENTRIES,
        ge=1,
        le=MAX_BATCH_ENTRIES,
        description="Maximum rows claimed per topic per sweep",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def sweep_interval_seconds(self) -> float:
        """Sweep interval in seconds."""
        return self.sweep_interval_ms / 1000
