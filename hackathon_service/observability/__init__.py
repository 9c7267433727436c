"""Observability helpers: structlog setup, Prometheus registry, ASGI middleware."""
