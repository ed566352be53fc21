"""Telemetry helpers and metrics."""

from .metrics import (
    ANALYSIS_COUNTER,
    ERROR_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    RESULT_STORE_SIZE,
    STAGE_LATENCY,
    observe_request,
    observe_stage,
    record_analysis,
    set_result_store_size,
)

__all__ = [
    "ANALYSIS_COUNTER",
    "ERROR_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "RESULT_STORE_SIZE",
    "STAGE_LATENCY",
    "observe_request",
    "observe_stage",
    "record_analysis",
    "set_result_store_size",
]
