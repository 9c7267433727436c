from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response

from hackathon_service.api.dependencies import get_metrics
from hackathon_service.observability.metrics import ServiceMetrics

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/ready")
async def ready() -> dict[str, str]:
    return {"status": "ready"}


@router.get("/metrics")
async def metrics(service_metrics: ServiceMetrics = Depends(get_metrics)) -> Response:
    return Response(content=service_metrics.render(), media_type=service_metrics.content_type)
