from __future__ import annotations

import asyncio
import time

from hackathon_service.services.chaos import ChaosState


async def test_memory_leak_grow_status_and_clear(api_client) -> None:
    before = await api_client.get("/chaos/status")
    assert before.json()["memoryLeak"] is False

    leak = await api_client.post("/chaos/memory-leak", params={"size": 10, "iterations": 2})
    assert leak.status_code == 200
    assert leak.json() == {"message": "Leaked 20MB", "totalLeaked": "20MB"}

    more = await api_client.post("/chaos/memory-leak", params={"size": 1, "iterations": 1})
    assert more.json()["totalLeaked"] == "21MB"

    status = await api_client.get("/chaos/status")
    payload = status.json()
    assert payload["memoryLeak"] is True
    assert payload["memory"]["leaked"] == "21MB"
    assert payload["memory"]["rss"].endswith("MB")
    assert payload["memory"]["vms"].endswith("MB")

    cleared = await api_client.delete("/chaos/memory-leak")
    assert cleared.status_code == 200
    assert cleared.json() == {"message": "Cleared", "count": 3}

    after = await api_client.get("/chaos/status")
    assert after.json()["memoryLeak"] is False
    assert after.json()["memory"]["leaked"] == "0MB"


def test_leaked_blocks_are_filled() -> None:
    chaos = ChaosState()
    leaked_mb, total_mb = chaos.leak_memory(size_mb=1, iterations=2)
    assert (leaked_mb, total_mb) == (2, 2)
    assert chaos.leaked_bytes == 2 * 1024 * 1024
    assert all(block[:4] == b"xxxx" and block[-1:] == b"x" for block in chaos._blocks)
    assert chaos.clear_memory() == 2
    assert chaos.leaked_bytes == 0


async def test_latency_set_report_and_clear(api_client) -> None:
    resp = await api_client.post("/chaos/latency", params={"delay": 150})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Latency: 150ms"}

    status = await api_client.get("/chaos/status")
    assert status.json()["artificialLatency"] == 150

    start = time.perf_counter()
    users = await api_client.get("/api/users")
    assert users.status_code == 200
    assert time.perf_counter() - start >= 0.15

    cleared = await api_client.delete("/chaos/latency")
    assert cleared.json() == {"message": "Latency cleared"}
    status = await api_client.get("/chaos/status")
    assert status.json()["artificialLatency"] == 0


async def test_latency_defaults_to_one_second(api_client) -> None:
    resp = await api_client.post("/chaos/latency")
    assert resp.json() == {"message": "Latency: 1000ms"}
    await api_client.delete("/chaos/latency")


async def test_latency_does_not_delay_chaos_or_health_endpoints(api_client) -> None:
    await api_client.post("/chaos/latency", params={"delay": 5000})

    start = time.perf_counter()
    assert (await api_client.get("/health")).status_code == 200
    assert (await api_client.get("/chaos/status")).status_code == 200
    assert (await api_client.delete("/chaos/latency")).status_code == 200
    assert time.perf_counter() - start < 2.0


async def test_cpu_spike_returns_immediately_and_finishes(api_client, app) -> None:
    start = time.perf_counter()
    resp = await api_client.post("/chaos/cpu-spike", params={"duration": 1000})
    assert resp.status_code == 200
    assert resp.json() == {"message": "CPU spike for 1000ms"}
    assert time.perf_counter() - start < 0.5

    chaos = app.state.chaos
    assert chaos.cpu_spike_active is True

    # Other requests are still served while the spike runs.
    health = await api_client.get("/health")
    assert health.status_code == 200

    deadline = time.perf_counter() + 5.0
    while chaos.cpu_spike_active and time.perf_counter() < deadline:
        await asyncio.sleep(0.05)
    assert chaos.cpu_spike_active is False

    status = await api_client.get("/chaos/status")
    assert status.json()["cpuSpikeActive"] is False


async def test_crash_acknowledges_then_terminates(api_client, terminate) -> None:
    resp = await api_client.post("/chaos/crash", params={"delay": 50})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Crashing in 50ms"}
    assert terminate.calls == []

    await asyncio.sleep(0.2)
    assert terminate.calls == [1]


async def test_crash_without_delay(api_client, terminate) -> None:
    resp = await api_client.post("/chaos/crash")
    assert resp.json() == {"message": "Crashing in 0ms"}

    await asyncio.sleep(0.05)
    assert terminate.calls == [1]


async def test_non_numeric_chaos_knobs_use_defaults(api_client, app, terminate) -> None:
    leak = await api_client.post("/chaos/memory-leak", params={"size": "x", "iterations": "two"})
    assert leak.status_code == 200
    assert leak.json() == {"message": "Leaked 50MB", "totalLeaked": "50MB"}
    await api_client.delete("/chaos/memory-leak")

    latency = await api_client.post("/chaos/latency", params={"delay": "soon"})
    assert latency.json() == {"message": "Latency: 1000ms"}
    await api_client.delete("/chaos/latency")

    spike = await api_client.post("/chaos/cpu-spike", params={"duration": "long"})
    assert spike.json() == {"message": "CPU spike for 5000ms"}
    assert app.state.chaos.stop_cpu_spikes() == 1

    crash = await api_client.post("/chaos/crash", params={"delay": "abc"})
    assert crash.status_code == 200
    assert crash.json() == {"message": "Crashing in 0ms"}
    await asyncio.sleep(0.05)
    assert terminate.calls == [1]
