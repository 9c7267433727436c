from __future__ import annotations

import re

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    GCCollector,
    Histogram,
    Info,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)


_REQUEST_LABELS = ("method", "path", "status_code")
_DURATION_BUCKETS = (0.001, 0.005, 0.015, 0.05, 0.1, 0.5, 1, 5)
_UUID_SEGMENT = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


def normalize_path(path: str) -> str:
    """Collapse variable path segments so label cardinality stays bounded.

    Purely numeric segments become ``:id`` and UUID segments become ``:uuid``.
    """

    segments = []
    for segment in path.split("/"):
        if segment.isdigit():
            segments.append(":id")
        elif _UUID_SEGMENT.match(segment):
            segments.append(":uuid")
        else:
            segments.append(segment)
    return "/".join(segments)


def error_type(status_code: int) -> str:
    return "server" if status_code >= 500 else "client"


class ServiceMetrics:
    """Prometheus series for HTTP traffic and business events.

    Each instance owns its own CollectorRegistry, so separate app instances
    (and tests) never collide on metric names.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(
        self,
        namespace: str = "hackathon",
        app_label: str = "hackathon-service",
        include_default: bool = True,
        registry: CollectorRegistry | None = None,
    ) -> None:
        self.namespace = namespace
        self.registry = registry if registry is not None else CollectorRegistry()

        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            _REQUEST_LABELS,
            namespace=namespace,
            registry=self.registry,
        )
        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration",
            _REQUEST_LABELS,
            namespace=namespace,
            buckets=_DURATION_BUCKETS,
            registry=self.registry,
        )
        self.http_requests_in_flight = Gauge(
            "http_requests_in_flight",
            "HTTP requests in progress",
            namespace=namespace,
            registry=self.registry,
        )
        self.errors_total = Counter(
            "errors_total",
            "Total errors",
            ("type", "path"),
            namespace=namespace,
            registry=self.registry,
        )
        self.orders_created_total = Counter(
            "orders_created_total",
            "Orders created",
            namespace=namespace,
            registry=self.registry,
        )
        self.users_registered_total = Counter(
            "users_registered_total",
            "Users registered",
            namespace=namespace,
            registry=self.registry,
        )

        if include_default:
            ProcessCollector(namespace=namespace, registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)
            service_info = Info("service", "Service identity", namespace=namespace, registry=self.registry)
            service_info.info({"app": app_label})

    def request_started(self) -> None:
        self.http_requests_in_flight.inc()

    def request_finished(self, method: str, path: str, status_code: int, elapsed_s: float) -> None:
        normalized = normalize_path(path)
        labels = {"method": method, "path": normalized, "status_code": str(status_code)}

        try:
            self.http_requests_total.labels(**labels).inc()
            self.http_request_duration.labels(**labels).observe(elapsed_s)
            if status_code >= 400:
                self.errors_total.labels(type=error_type(status_code), path=normalized).inc()
        finally:
            self.http_requests_in_flight.dec()

    def user_registered(self) -> None:
        self.users_registered_total.inc()

    def order_created(self) -> None:
        self.orders_created_total.inc()

    def render(self) -> bytes:
        return generate_latest(self.registry)

    def sample(self, name: str, labels: dict[str, str] | None = None) -> float | None:
        """Read a single sample by its unprefixed name (used by tests and status)."""

        return self.registry.get_sample_value(f"{self.namespace}_{name}", labels or {})
