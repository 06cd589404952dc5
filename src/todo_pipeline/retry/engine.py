"""
Retry orchestrator: the outermost layer of the request pipeline.

RetryTransport drives repeated attempts through the wrapped chain using the
decisions made in todo_pipeline.retry.policy. Per logical call:

    ATTEMPTING -> SUCCESS            2xx response, returned immediately
    ATTEMPTING -> TERMINAL_FAILURE   non-retryable status (returned as-is),
                                     non-retryable exception (re-raised), or
                                     budget exhausted (last response returned /
                                     last exception re-raised)
    ATTEMPTING -> RETRY_WAIT         retryable status or exception with budget
                                     left; response closed, retry event emitted,
                                     backoff awaited
    RETRY_WAIT -> ATTEMPTING

With a budget of N retries the inner chain is invoked at most N + 1 times.
No new exception types are introduced: transport exceptions reach the caller
unchanged, and cancellation of the backoff wait propagates immediately.

Usage:
    transport = RetryTransport(inner, provider)
    async with httpx.AsyncClient(transport=transport) as client:
        response = await client.get("https://api.todoapp.com/v1/tasks")
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

import httpx
import structlog

from todo_pipeline.environment import EnvironmentProvider
from todo_pipeline.models.enums import AttemptOutcome
from todo_pipeline.models.pipeline_config import CONFIG_EXTENSION_KEY, PipelineConfig
from todo_pipeline.monitoring.diagnostics import (
    DiagnosticsSink,
    NullDiagnosticsSink,
    SafeDiagnostics,
)
from todo_pipeline.retry import policy
from todo_pipeline.retry.metadata import CallSummary, RequestAttempt, RetryEvent

logger = structlog.get_logger(__name__)

RetryHook = Callable[[RetryEvent], None]
SleepFunc = Callable[[float], Awaitable[None]]


class RetryTransport(httpx.AsyncBaseTransport):
    """
    httpx transport that retries transient failures of the wrapped chain.

    Attributes:
        wrapped: Inner transport (logger, router, network)
        config_provider: Source of the per-call PipelineConfig snapshot
        diagnostics: Sink notified of call start/success/failure/retry
        on_retry: Optional hook receiving every RetryEvent before the wait
    """

    def __init__(
        self,
        wrapped: httpx.AsyncBaseTransport,
        config_provider: EnvironmentProvider,
        diagnostics: Optional[DiagnosticsSink] = None,
        on_retry: Optional[RetryHook] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.wrapped = wrapped
        self.config_provider = config_provider
        self.diagnostics = SafeDiagnostics(diagnostics or NullDiagnosticsSink())
        self.on_retry = on_retry
        self._sleep = sleep

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        # One snapshot per logical call, shared by every attempt and layer
        config = self.config_provider.snapshot()
        request.extensions = {**request.extensions, CONFIG_EXTENSION_KEY: config}

        environment = config.environment
        budget = policy.max_attempts(environment)
        attempts: list[RequestAttempt] = []
        start_time = time.perf_counter()

        self.diagnostics.call_started(request)

        try:
            for attempt_index in range(budget + 1):
                attempt_started = datetime.now(timezone.utc)

                try:
                    response = await self.wrapped.handle_async_request(request)
                except Exception as e:
                    decision = policy.decide_for_exception(e, attempt_index, environment)

                    if decision.retryable and attempt_index < budget:
                        attempts.append(RequestAttempt(
                            index=attempt_index,
                            started_at=attempt_started,
                            outcome=AttemptOutcome.RETRYABLE_FAILURE,
                            error_type=type(e).__name__,
                        ))
                        await self._wait_before_retry(
                            request, attempt_index, budget, decision, type(e).__name__
                        )
                        continue

                    attempts.append(RequestAttempt(
                        index=attempt_index,
                        started_at=attempt_started,
                        outcome=AttemptOutcome.TERMINAL_FAILURE,
                        error_type=type(e).__name__,
                    ))
                    logger.warning(
                        "Transport failure is terminal",
                        url=str(request.url),
                        attempt=attempt_index,
                        max_attempts=budget,
                        retryable=decision.retryable,
                        error_type=type(e).__name__,
                    )
                    self.diagnostics.call_failed(
                        request, self._summary(config, attempts, start_time), error=e
                    )
                    raise

                if response.is_success:
                    attempts.append(RequestAttempt(
                        index=attempt_index,
                        started_at=attempt_started,
                        outcome=AttemptOutcome.SUCCESS,
                        status_code=response.status_code,
                    ))
                    self.diagnostics.call_succeeded(
                        request, response, self._summary(config, attempts, start_time)
                    )
                    return response

                decision = policy.decide_for_status(response.status_code, attempt_index, environment)

                if decision.retryable and attempt_index < budget:
                    attempts.append(RequestAttempt(
                        index=attempt_index,
                        started_at=attempt_started,
                        outcome=AttemptOutcome.RETRYABLE_FAILURE,
                        status_code=response.status_code,
                    ))
                    await response.aclose()
                    await self._wait_before_retry(
                        request, attempt_index, budget, decision, str(response.status_code)
                    )
                    continue

                # Non-retryable status, or retryable with the budget spent:
                # the response itself is the final result
                attempts.append(RequestAttempt(
                    index=attempt_index,
                    started_at=attempt_started,
                    outcome=AttemptOutcome.TERMINAL_FAILURE,
                    status_code=response.status_code,
                ))
                if decision.retryable:
                    logger.warning(
                        "Retries exhausted, returning last response",
                        url=str(request.url),
                        status_code=response.status_code,
                        total_attempts=len(attempts),
                    )
                self.diagnostics.call_failed(
                    request, self._summary(config, attempts, start_time), response=response
                )
                return response

        except asyncio.CancelledError:
            logger.info(
                "API call cancelled",
                url=str(request.url),
                attempts_made=len(attempts),
            )
            raise

        # Should not reach here: the last attempt always returns or raises
        raise RuntimeError("retry loop ended without a result")

    async def _wait_before_retry(
        self,
        request: httpx.Request,
        attempt_index: int,
        budget: int,
        decision: policy.RetryDecision,
        reason: str,
    ) -> None:
        """Emit the retry event, then back off for decision.delay_ms."""
        event = RetryEvent(
            url=str(request.url),
            attempt=attempt_index + 1,
            max_attempts=budget,
            delay_ms=decision.delay_ms,
            reason=reason,
        )
        self.diagnostics.call_retried(request, event)

        if self.on_retry is not None:
            try:
                self.on_retry(event)
            except Exception as e:
                logger.warning("Retry hook raised, ignoring", error=str(e), error_type=type(e).__name__)

        await self._sleep(decision.delay_seconds)

    @staticmethod
    def _summary(
        config: PipelineConfig, attempts: list[RequestAttempt], start_time: float
    ) -> CallSummary:
        return CallSummary(
            environment=config.environment,
            attempts=list(attempts),
            total_latency_ms=int((time.perf_counter() - start_time) * 1000),
        )

    async def aclose(self) -> None:
        await self.wrapped.aclose()
