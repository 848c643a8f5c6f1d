"""Prometheus metrics helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

HTTP_REQUESTS_TOTAL = Counter(
    "richhabits_http_requests_total",
    "Total number of HTTP requests.",
    ["method", "route", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "richhabits_http_request_duration_seconds",
    "HTTP request duration in seconds.",
    ["method", "route", "status"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

SIDE_EFFECTS_TOTAL = Counter(
    "richhabits_side_effects_total",
    "Best-effort side effects by outcome.",
    ["name", "status"],
)

ORGANIZATION_MUTATIONS_TOTAL = Counter(
    "richhabits_organization_mutations_total",
    "Organization create/update/delete operations.",
    ["operation"],
)


def observe_http_request(
    *,
    method: str,
    route: str,
    status_code: int,
    duration_ms: float,
) -> None:
    status = str(status_code)
    HTTP_REQUESTS_TOTAL.labels(method=method, route=route, status=status).inc()
    HTTP_REQUEST_DURATION_SECONDS.labels(
        method=method, route=route, status=status
    ).observe(duration_ms / 1000.0)


def record_side_effect(name: str, status: str) -> None:
    SIDE_EFFECTS_TOTAL.labels(name=name, status=status).inc()


def record_organization_mutation(operation: str) -> None:
    ORGANIZATION_MUTATIONS_TOTAL.labels(operation=operation).inc()
