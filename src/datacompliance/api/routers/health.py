"""Health check and metrics endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST

from datacompliance.observability.metrics import get_metrics

router = APIRouter(tags=["health"])


@router.get("/health", summary="Basic health check")
async def health_check() -> dict[str, str]:
    """Liveness check; does not touch the stores."""
    return {"status": "healthy", "timestamp": datetime.now(UTC).isoformat()}


@router.get("/metrics", summary="Prometheus metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)
