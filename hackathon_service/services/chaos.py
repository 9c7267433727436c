from __future__ import annotations

import asyncio
import gc
import math
import os
import random
from threading import Lock
from time import perf_counter
from typing import Callable

import psutil
import structlog

from hackathon_service.models.schemas import ChaosStatus, MemoryUsage

logger = structlog.get_logger(__name__)

_MB = 1024 * 1024


def _format_mb(num_bytes: int) -> str:
    return f"{round(num_bytes / _MB)}MB"


class ChaosState:
    """Process-wide fault state: leaked memory, artificial latency, CPU spikes.

    Leaked blocks live until ``clear_memory`` is called. The latency value is
    last-writer-wins. Both reset only on restart or explicit clear.
    """

    def __init__(self, cpu_slice_ms: int = 10, terminate: Callable[[int], None] = os._exit) -> None:
        self._lock = Lock()
        self._blocks: list[bytearray] = []
        self._spikes: set[asyncio.Task[None]] = set()
        self._terminate = terminate
        self.cpu_slice_ms = cpu_slice_ms
        self.latency_ms = 0

    def leak_memory(self, size_mb: int, iterations: int) -> tuple[int, int]:
        """Allocate and retain ``iterations`` blocks of ``size_mb``.

        Returns (MB leaked by this call, MB held in total).
        """

        new_blocks = []
        for _ in range(iterations):
            # Filled rather than zeroed so the pages are actually touched.
            new_blocks.append(bytearray(b"x") * (size_mb * _MB))

        with self._lock:
            self._blocks.extend(new_blocks)
            total_bytes = sum(len(block) for block in self._blocks)

        total_mb = total_bytes // _MB
        logger.warning("chaos.memory_leak", leaked_mb=size_mb * iterations, total_mb=total_mb)
        return size_mb * iterations, total_mb

    def clear_memory(self) -> int:
        with self._lock:
            count = len(self._blocks)
            self._blocks = []
        gc.collect()

        logger.info("chaos.memory_cleared", count=count)
        return count

    @property
    def leaked_bytes(self) -> int:
        with self._lock:
            return sum(len(block) for block in self._blocks)

    def set_latency(self, delay_ms: int) -> None:
        self.latency_ms = delay_ms
        logger.warning("chaos.latency_set", latency_ms=delay_ms)

    def clear_latency(self) -> None:
        self.latency_ms = 0
        logger.info("chaos.latency_cleared")

    async def apply_latency(self) -> None:
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000)

    def start_cpu_spike(self, duration_ms: int) -> asyncio.Task[None]:
        logger.warning("chaos.cpu_spike", duration_ms=duration_ms)
        task = asyncio.get_running_loop().create_task(self._burn_cpu(duration_ms))
        self._spikes.add(task)
        task.add_done_callback(self._spikes.discard)
        return task

    async def _burn_cpu(self, duration_ms: int) -> None:
        deadline = perf_counter() + duration_ms / 1000
        slice_s = self.cpu_slice_ms / 1000
        x = 0.0
        j = 0
        while perf_counter() < deadline:
            slice_end = min(deadline, perf_counter() + slice_s)
            while perf_counter() < slice_end:
                for _ in range(1000):
                    x += math.sqrt(j) * random.random()
                    j += 1
            # Let other requests run between slices.
            await asyncio.sleep(0)
        logger.info("chaos.cpu_spike_finished", duration_ms=duration_ms)

    def stop_cpu_spikes(self) -> int:
        running = [task for task in self._spikes if not task.done()]
        for task in running:
            task.cancel()
        return len(running)

    @property
    def cpu_spike_active(self) -> bool:
        return any(not task.done() for task in self._spikes)

    async def schedule_crash(self, delay_ms: int) -> None:
        """Terminate the process with exit code 1 after ``delay_ms``.

        Runs as a background task, after the acknowledgement has been sent.
        """

        asyncio.get_running_loop().call_later(delay_ms / 1000, self._crash)

    def _crash(self) -> None:
        logger.error("chaos.crash_now")
        self._terminate(1)

    def status(self) -> ChaosStatus:
        mem = psutil.Process().memory_info()
        with self._lock:
            block_count = len(self._blocks)
            leaked = sum(len(block) for block in self._blocks)
        return ChaosStatus(
            memory_leak=block_count > 0,
            artificial_latency=self.latency_ms,
            cpu_spike_active=self.cpu_spike_active,
            memory=MemoryUsage(
                leaked=_format_mb(leaked),
                rss=_format_mb(mem.rss),
                vms=_format_mb(mem.vms),
            ),
        )
