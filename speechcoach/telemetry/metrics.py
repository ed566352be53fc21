"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

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
        30.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

ANALYSIS_COUNTER = Counter(
    "speech_analyses_total",
    "Speech analysis runs by outcome",
    ("outcome", "stage", "kind"),
)

STAGE_LATENCY = Histogram(
    "speech_analysis_stage_duration_seconds",
    "Duration of each speech analysis stage in seconds",
    ("stage",),
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 15.0, 30.0, 60.0),
)

RESULT_STORE_SIZE = Gauge(
    "speech_analysis_results_stored",
    "Number of analysis results currently held in memory",
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


def observe_stage(stage: str, duration_seconds: float) -> None:
    """Record how long one pipeline stage took."""

    STAGE_LATENCY.labels(stage=stage).observe(max(0.0, duration_seconds))


def record_analysis(outcome: str, stage: str = "", kind: str = "") -> None:
    """Count a finished analysis run ("success" or "failure")."""

    ANALYSIS_COUNTER.labels(outcome=outcome, stage=stage or "none", kind=kind or "none").inc()


def set_result_store_size(size: int) -> None:
    RESULT_STORE_SIZE.set(size)
