"""Custom Prometheus metrics for the Todo API pipeline.

These metrics are registered in the default prometheus_client registry and
exported by whatever process hosts the pipeline.
Alert rules should be configured for:
- api_calls_total (high failure outcome ratio)
- api_retries_total (high retry rate indicates backend instability)
"""

from prometheus_client import Counter, Histogram

# === Call Metrics ===

api_calls_total = Counter(
    "todo_api_calls_total",
    "Total logical API calls by method and outcome",
    ["method", "outcome"],
)
"""
Logical API calls counter.

Labels:
- method: HTTP method (GET, POST, ...)
- outcome: success (2xx), http_error (final non-2xx response), exception (transport failure)

Alert thresholds:
- WARN: exception rate > 5% of calls
"""

# === Retry Metrics ===

api_retries_total = Counter(
    "todo_api_retries_total",
    "Total retries scheduled by trigger",
    ["reason"],
)
"""
Retry counter.

Labels:
- reason: retryable status code (e.g. "503") or exception class name (e.g. "ConnectTimeout")
"""

# === Latency Metrics ===

api_call_latency_seconds = Histogram(
    "todo_api_call_latency_seconds",
    "End-to-end latency of logical API calls including retries",
    ["method"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)
