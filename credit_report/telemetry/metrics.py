"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

LLM_ATTEMPTS = Counter(
    "llm_attempts_total",
    "Provider call attempts by outcome",
    ("provider", "outcome"),
)

LLM_LATENCY = Histogram(
    "llm_request_duration_seconds",
    "Provider call duration in seconds",
    ("provider",),
    buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0),
)

REPORT_GENERATIONS = Counter(
    "report_generations_total",
    "Report generation runs by outcome",
    ("outcome",),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def observe_llm_attempt(provider: str, outcome: str) -> None:
    """Count one provider attempt (``success``, ``http_error``, ``network_error``, ``timeout``)."""

    LLM_ATTEMPTS.labels(provider=provider or "unknown", outcome=outcome).inc()


def observe_llm_latency(provider: str, duration_seconds: float) -> None:
    LLM_LATENCY.labels(provider=provider or "unknown").observe(max(duration_seconds, 0))


def increment_report(outcome: str) -> None:
    """Count a finished report run (``success``, ``cached``, ``failed``)."""

    REPORT_GENERATIONS.labels(outcome=outcome).inc()
