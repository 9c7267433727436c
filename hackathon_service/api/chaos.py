from __future__ import annotations

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends

from hackathon_service.api.dependencies import get_chaos
from hackathon_service.api.params import int_param
from hackathon_service.models.schemas import ChaosStatus, ClearedResponse, MemoryLeakResponse, MessageResponse
from hackathon_service.services.chaos import ChaosState

router = APIRouter(prefix="/chaos", tags=["chaos"])

logger = structlog.get_logger(__name__)


@router.post("/crash", response_model=MessageResponse)
async def crash(
    background_tasks: BackgroundTasks,
    delay: str | None = None,
    chaos: ChaosState = Depends(get_chaos),
) -> MessageResponse:
    delay_ms = max(int_param(delay, 0), 0)
    logger.error("chaos.crash", delay_ms=delay_ms)
    # Background tasks run after the response has been sent.
    background_tasks.add_task(chaos.schedule_crash, delay_ms)
    return MessageResponse(message=f"Crashing in {delay_ms}ms")


@router.post("/memory-leak", response_model=MemoryLeakResponse)
async def memory_leak(
    size: str | None = None,
    iterations: str | None = None,
    chaos: ChaosState = Depends(get_chaos),
) -> MemoryLeakResponse:
    leaked_mb, total_mb = chaos.leak_memory(
        size_mb=max(int_param(size, 50), 0),
        iterations=max(int_param(iterations, 1), 0),
    )
    return MemoryLeakResponse(message=f"Leaked {leaked_mb}MB", total_leaked=f"{total_mb}MB")


@router.delete("/memory-leak", response_model=ClearedResponse)
async def clear_memory_leak(chaos: ChaosState = Depends(get_chaos)) -> ClearedResponse:
    count = chaos.clear_memory()
    return ClearedResponse(message="Cleared", count=count)


@router.post("/cpu-spike", response_model=MessageResponse)
async def cpu_spike(duration: str | None = None, chaos: ChaosState = Depends(get_chaos)) -> MessageResponse:
    duration_ms = int_param(duration, 5000)
    chaos.start_cpu_spike(duration_ms=duration_ms)
    return MessageResponse(message=f"CPU spike for {duration_ms}ms")


@router.post("/latency", response_model=MessageResponse)
async def set_latency(delay: str | None = None, chaos: ChaosState = Depends(get_chaos)) -> MessageResponse:
    delay_ms = max(int_param(delay, 1000), 0)
    chaos.set_latency(delay_ms)
    return MessageResponse(message=f"Latency: {delay_ms}ms")


@router.delete("/latency", response_model=MessageResponse)
async def clear_latency(chaos: ChaosState = Depends(get_chaos)) -> MessageResponse:
    chaos.clear_latency()
    return MessageResponse(message="Latency cleared")


@router.get("/status", response_model=ChaosStatus)
async def status(chaos: ChaosState = Depends(get_chaos)) -> ChaosStatus:
    return chaos.status()
