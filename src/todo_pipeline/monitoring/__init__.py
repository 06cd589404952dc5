"""Monitoring and diagnostics for the Todo API pipeline.

Exports the diagnostics sink protocol, its implementations and the
Prometheus metrics they feed.
"""

from todo_pipeline.monitoring.diagnostics import (
    DiagnosticsSink,
    MetricsDiagnosticsSink,
    NullDiagnosticsSink,
    SafeDiagnostics,
)
from todo_pipeline.monitoring.metrics import (
    api_call_latency_seconds,
    api_calls_total,
    api_retries_total,
)

__all__ = [
    "DiagnosticsSink",
    "MetricsDiagnosticsSink",
    "NullDiagnosticsSink",
    "SafeDiagnostics",
    "api_calls_total",
    "api_retries_total",
    "api_call_latency_seconds",
]
