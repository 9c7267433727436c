from __future__ import annotations

import random

from fastapi import Depends, Request

from hackathon_service.observability.metrics import ServiceMetrics
from hackathon_service.services.chaos import ChaosState
from hackathon_service.services.store import ResourceStore


def get_store(request: Request) -> ResourceStore:
    return request.app.state.store


def get_chaos(request: Request) -> ChaosState:
    return request.app.state.chaos


def get_metrics(request: Request) -> ServiceMetrics:
    return request.app.state.metrics


def get_rng(request: Request) -> random.Random:
    return request.app.state.rng


async def apply_artificial_latency(chaos: ChaosState = Depends(get_chaos)) -> None:
    """Delay the request by the currently configured chaos latency, if any."""

    await chaos.apply_latency()
