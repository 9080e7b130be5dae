"""Response schemas for the liveness endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LivenessResponse(BaseModel):
    """Liveness probe response.

    The process is alive as long as it answers; sweep failures do not make
    it unhealthy.

    Example:
        ```json
        {
            "alive": true,
            "timestamp": "2025-01-01T00:00:00Z",
            "service": "outbox-sweeper",
            "version": "0.1.0",
            "sweeper_running": true,
            "sweeps_in_flight": 0
        }
        ```
    """

    alive: bool = Field(description="Liveness status")
    timestamp: datetime = Field(description="Check timestamp")
    service: str = Field(min_length=1, max_length=100, description="Service name")
    version: str = Field(description="Service version")
    sweeper_running: bool = Field(description="Whether periodic sweeps are scheduled")
    sweeps_in_flight: int = Field(ge=0, description="Sweep invocations currently running")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "alive": True,
                "timestamp": "2025-01-01T00:00:00Z",
                "service": "outbox-sweeper",
                "version": "0.1.0",
                "sweeper_running": True,
                "sweeps_in_flight": 0,
            },
        },
    )
