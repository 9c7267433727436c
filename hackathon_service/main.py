from __future__ import annotations

import os
import random
from typing import Callable

import structlog
from fastapi import FastAPI

from hackathon_service.api.chaos import router as chaos_router
from hackathon_service.api.health import router as health_router
from hackathon_service.api.resources import router as resources_router
from hackathon_service.config import Settings, get_settings
from hackathon_service.errors import register_error_handlers
from hackathon_service.observability.logging import configure_logging
from hackathon_service.observability.metrics import ServiceMetrics
from hackathon_service.observability.middleware import MetricsMiddleware, RequestContextMiddleware
from hackathon_service.services.chaos import ChaosState
from hackathon_service.services.store import ResourceStore


def create_app(
    settings: Settings | None = None,
    *,
    rng: random.Random | None = None,
    terminate: Callable[[int], None] | None = None,
) -> FastAPI:
    """Build the service with its own store, chaos state and metrics registry."""

    settings = settings or get_settings()
    configure_logging(settings.log_level, service=settings.app_label)

    metrics = ServiceMetrics(
        namespace=settings.metrics_namespace,
        app_label=settings.app_label,
        include_default=settings.enable_default_metrics,
    )
    chaos = ChaosState(cpu_slice_ms=settings.cpu_spike_slice_ms, terminate=terminate or os._exit)

    app = FastAPI(title="Hackathon Service", version="0.1.0")
    app.state.settings = settings
    app.state.metrics = metrics
    app.state.store = ResourceStore()
    app.state.chaos = chaos
    app.state.rng = rng or random.Random()

    # Last added runs outermost: request context wraps metrics.
    app.add_middleware(MetricsMiddleware, metrics=metrics)
    app.add_middleware(RequestContextMiddleware)

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(resources_router)
    app.include_router(chaos_router)

    @app.on_event("startup")
    async def _startup() -> None:
        structlog.get_logger("lifecycle").info("startup", port=settings.port)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        stopped = chaos.stop_cpu_spikes()
        structlog.get_logger("lifecycle").info("shutdown", cpu_spikes_stopped=stopped)

    return app


app = create_app()
