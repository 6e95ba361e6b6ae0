"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    LLM_ATTEMPTS,
    LLM_LATENCY,
    REPORT_GENERATIONS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    increment_report,
    observe_llm_attempt,
    observe_llm_latency,
    observe_request,
)

__all__ = [
    "ERROR_COUNTER",
    "LLM_ATTEMPTS",
    "LLM_LATENCY",
    "REPORT_GENERATIONS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "increment_report",
    "observe_llm_attempt",
    "observe_llm_latency",
    "observe_request",
]
