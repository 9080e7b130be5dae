"""Liveness and metrics endpoints.

- ``GET /health`` - plain ``OK``, for load balancers and container probes
- ``GET /health/live`` - JSON liveness document
- ``GET /metrics`` - Prometheus scrape endpoint

None of them depend on the database or AWS: the process is reported alive
even while sweeps are failing.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from outbox_sweeper.app.schemas import LivenessResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_class=PlainTextResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def health() -> str:
    """Return ``OK`` while the process is running."""
    return "OK"


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe (Kubernetes)",
)
async def liveness(request: Request) -> LivenessResponse:
    """Liveness probe with basic process information.

    Returns:
        LivenessResponse indicating the service is alive.
    """
    settings = request.app.state.settings
    service = getattr(request.app.state, "service", None)
    scheduler = service.scheduler if service is not None else None

    return LivenessResponse(
        alive=True,
        timestamp=datetime.now(UTC),
        service=settings.app.service_name,
        version=settings.app.version,
        sweeper_running=scheduler is not None and scheduler.running,
        sweeps_in_flight=scheduler.in_flight if scheduler is not None else 0,
    )


@router.get("/metrics", tags=["observability"])
async def metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
