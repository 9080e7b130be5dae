"""Application settings for the sweeper process and its liveness endpoint."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "staging", "production", "test"]


class AppSettings(BaseSettings):
    """Process identity and liveness server binding.

    Environment variables use APP_ prefix.
    Example: APP_PORT=8080, APP_ENVIRONMENT=production
    """

    service_name: str = Field(
        default="outbox-sweeper",
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
        description="Service name for logging/metrics (lowercase, hyphens allowed)",
    )
    version: str = Field(
        default="0.1.0",
        min_length=1,
        max_length=50,
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9]+)?$",
        description="Service version (semver format)",
    )
    environment: Environment = Field(
        default="development", description="Environment: development|staging|production|test",
    )

    host: str = Field(default="0.0.0.0", description="Liveness server bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="Liveness server port")

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
