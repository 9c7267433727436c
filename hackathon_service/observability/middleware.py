from __future__ import annotations

import uuid
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import MutableHeaders

from hackathon_service.observability.metrics import ServiceMetrics, normalize_path


EXCLUDED_METRIC_PATHS = frozenset({"/metrics", "/health", "/ready"})


class RequestContextMiddleware:
    """Binds request context for structlog and writes one access log line.

    A caller-supplied ``X-Request-ID`` is reused, otherwise a uuid4 is issued.
    5xx responses are logged at warning level.
    """

    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app

    @staticmethod
    def _incoming_request_id(scope: dict[str, Any]) -> str | None:
        for name, value in scope.get("headers") or []:
            if name.lower() == b"x-request-id" and value:
                return value.decode("latin-1")
        return None

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = self._incoming_request_id(scope) or str(uuid.uuid4())
        path = scope.get("path", "")

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=path,
            route=normalize_path(path),
            method=scope.get("method"),
        )

        start = perf_counter()
        status_code: int = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (perf_counter() - start) * 1000.0
            access_log = structlog.get_logger("access")
            log = access_log.warning if status_code >= 500 else access_log.info
            log(
                "http_request",
                status_code=status_code,
                elapsed_ms=round(elapsed_ms, 2),
            )
            structlog.contextvars.clear_contextvars()


class MetricsMiddleware:
    """Times every request and records it in the Prometheus series.

    Observability endpoints pass through untouched. A request that raises is
    recorded as a 500. Failures while recording are logged and never reach
    the client.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        metrics: ServiceMetrics,
        excluded_paths: frozenset[str] = EXCLUDED_METRIC_PATHS,
    ) -> None:
        self.app = app
        self.metrics = metrics
        self._excluded_paths = excluded_paths

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        path = scope.get("path", "")
        if scope.get("type") != "http" or path in self._excluded_paths:
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "")
        start = perf_counter()
        status_code: int = 500
        started = self._safely(self.metrics.request_started)

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if started:
                self._safely(
                    self.metrics.request_finished,
                    method=method,
                    path=path,
                    status_code=status_code,
                    elapsed_s=perf_counter() - start,
                )

    @staticmethod
    def _safely(fn: Callable[..., None], **kwargs: Any) -> bool:
        try:
            fn(**kwargs)
        except Exception:
            # Instrumentation must never break the request it measures.
            structlog.get_logger("metrics").warning("metrics_record_failed", exc_info=True)
            return False
        return True
