"""AWS messaging client settings.

Environment variables use AWS_ prefix.
Example: AWS_REGION="eu-west-1"
         AWS_ENDPOINT_URL="http://localhost:4566"   # LocalStack

Credentials are not configured here: the default botocore credential chain
(environment, shared config, instance/task role) is used.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AwsSettings(BaseSettings):
    """Settings shared by the SQS and SNS clients."""

    region: str = Field(
        min_length=1,
        max_length=50,
        description="AWS region for both messaging clients (required).",
    )

    endpoint_url: str | None = Field(
        default=None,
        description="Endpoint override for LocalStack/ElasticMQ. None for AWS.",
    )

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum botocore retry attempts per API call",
    )

    retry_mode: Literal["standard", "adaptive", "legacy"] = Field(
        default="standard",
        description="botocore retry mode",
    )

    connect_timeout: float = Field(
        default=5.0,
        ge=0.1,
        le=60.0,
        description="Connection timeout in seconds",
    )

    read_timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Read timeout in seconds",
    )

    max_pool_connections: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Maximum number of HTTP connections per client",
    )

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    def get_boto3_config(self) -> dict[str, Any]:
        """Keyword arguments for ``aioboto3.Session.client()``.

        Returns:
            Region and, when set, the endpoint override.
        """
        config: dict[str, Any] = {"region_name": self.region}
        if self.endpoint_url:
            config["endpoint_url"] = self.endpoint_url
        return config
