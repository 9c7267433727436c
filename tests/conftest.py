from __future__ import annotations

import random
from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from hackathon_service.config import get_settings
from hackathon_service.main import create_app
from hackathon_service.observability.metrics import ServiceMetrics


class RecordingTerminate:
    """Stands in for os._exit so crash tests keep the test process alive."""

    def __init__(self) -> None:
        self.calls: list[int] = []

    def __call__(self, code: int) -> None:
        self.calls.append(code)


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENABLE_DEFAULT_METRICS", "false")
    monkeypatch.setenv("CPU_SPIKE_SLICE_MS", "5")
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def terminate() -> RecordingTerminate:
    return RecordingTerminate()


@pytest.fixture
def app(terminate: RecordingTerminate) -> FastAPI:
    return create_app(rng=random.Random(1234), terminate=terminate)


@pytest.fixture
def metrics(app: FastAPI) -> ServiceMetrics:
    return app.state.metrics


@pytest.fixture
async def api_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
