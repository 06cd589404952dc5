"""
Diagnostics sink for pipeline telemetry.

The retry orchestrator reports every logical call through a DiagnosticsSink.
Sinks are fire-and-forget: SafeDiagnostics guarantees that a failing sink
can never raise back into the request path.
"""

from typing import TYPE_CHECKING, Optional, Protocol

import httpx
import structlog

from todo_pipeline.monitoring.metrics import (
    api_call_latency_seconds,
    api_calls_total,
    api_retries_total,
)

if TYPE_CHECKING:
    from todo_pipeline.retry.metadata import CallSummary, RetryEvent

logger = structlog.get_logger(__name__)


class DiagnosticsSink(Protocol):
    """Structured telemetry callbacks for one logical call."""

    def call_started(self, request: httpx.Request) -> None:
        ...

    def call_succeeded(
        self, request: httpx.Request, response: httpx.Response, summary: "CallSummary"
    ) -> None:
        ...

    def call_failed(
        self,
        request: httpx.Request,
        summary: "CallSummary",
        response: Optional[httpx.Response] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        ...

    def call_retried(self, request: httpx.Request, event: "RetryEvent") -> None:
        ...


class NullDiagnosticsSink:
    """Sink that discards everything."""

    def call_started(self, request):
        pass

    def call_succeeded(self, request, response, summary):
        pass

    def call_failed(self, request, summary, response=None, error=None):
        pass

    def call_retried(self, request, event):
        pass


class MetricsDiagnosticsSink:
    """
    Default sink: structlog records plus Prometheus metrics.

    Args:
        metrics_enabled: Set False to skip Prometheus updates (tests, CLI tools)
    """

    def __init__(self, metrics_enabled: bool = True):
        self.metrics_enabled = metrics_enabled

    def call_started(self, request: httpx.Request) -> None:
        logger.debug("API call started", method=request.method, url=str(request.url))

    def call_succeeded(
        self, request: httpx.Request, response: httpx.Response, summary: "CallSummary"
    ) -> None:
        logger.info(
            "API call succeeded",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            attempts=summary.total_attempts,
            latency_ms=summary.total_latency_ms,
        )
        self._observe(request, "success", summary)

    def call_failed(
        self,
        request: httpx.Request,
        summary: "CallSummary",
        response: Optional[httpx.Response] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        logger.error(
            "API call failed",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code if response is not None else None,
            error_type=type(error).__name__ if error is not None else None,
            error=str(error) if error is not None else None,
            attempts=summary.total_attempts,
            latency_ms=summary.total_latency_ms,
        )
        self._observe(request, "exception" if error is not None else "http_error", summary)

    def call_retried(self, request: httpx.Request, event: "RetryEvent") -> None:
        logger.warning(
            f"API retry (attempt {event.attempt}/{event.max_attempts})",
            url=event.url,
            attempt=event.attempt,
            max_attempts=event.max_attempts,
            delay_ms=event.delay_ms,
            reason=event.reason,
        )
        if self.metrics_enabled:
            api_retries_total.labels(reason=event.reason).inc()

    def _observe(self, request: httpx.Request, outcome: str, summary: "CallSummary") -> None:
        if not self.metrics_enabled:
            return
        api_calls_total.labels(method=request.method, outcome=outcome).inc()
        api_call_latency_seconds.labels(method=request.method).observe(
            summary.total_latency_ms / 1000.0
        )


class SafeDiagnostics:
    """
    Wraps a sink so its exceptions are logged and dropped.

    The pipeline only ever talks to sinks through this wrapper.
    """

    def __init__(self, sink: DiagnosticsSink):
        self.sink = sink

    def call_started(self, request: httpx.Request) -> None:
        self._dispatch("call_started", request)

    def call_succeeded(
        self, request: httpx.Request, response: httpx.Response, summary: "CallSummary"
    ) -> None:
        self._dispatch("call_succeeded", request, response, summary)

    def call_failed(
        self,
        request: httpx.Request,
        summary: "CallSummary",
        response: Optional[httpx.Response] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self._dispatch("call_failed", request, summary, response=response, error=error)

    def call_retried(self, request: httpx.Request, event: "RetryEvent") -> None:
        self._dispatch("call_retried", request, event)

    def _dispatch(self, name: str, *args, **kwargs) -> None:
        try:
            getattr(self.sink, name)(*args, **kwargs)
        except Exception as e:
            logger.warning(
                "Diagnostics sink raised, ignoring",
                callback=name,
                sink=type(self.sink).__name__,
                error=str(e),
                error_type=type(e).__name__,
            )
