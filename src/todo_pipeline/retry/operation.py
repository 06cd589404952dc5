"""
Operation-level retry for arbitrary awaitables.

Repository code that is not a single HTTP exchange (a login followed by a
profile fetch, a batch of writes, a token exchange) reuses the same policy
as RetryTransport: exceptions are classified with policy.decide_for_exception
and backed off with the environment's delays. Responses are not inspected;
only raised exceptions trigger a retry.

Usage:
    retrier = OperationRetrier(provider)
    tasks = await retrier.run(lambda: repo.sync_tasks(), operation_name="sync_tasks")

    result = await retrier.run_with_result(fetch_profile, operation_name="profile")
    if result.is_success:
        ...
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

import structlog

from todo_pipeline.environment import EnvironmentProvider
from todo_pipeline.retry import policy
from todo_pipeline.retry.engine import RetryHook, SleepFunc
from todo_pipeline.retry.metadata import RetryEvent

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]

DEFAULT_OPERATION_NAME = "Unknown"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """
    Outcome of run_with_result(): either a value or the terminal exception.

    Attributes:
        value: Operation result (None on failure)
        error: Exception that ended the operation (None on success)
    """

    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    def get_or_raise(self) -> T:
        """Return the value, or re-raise the original exception."""
        if self.error is not None:
            raise self.error
        return self.value


class OperationRetrier:
    """
    Retries an async operation on transient failures.

    Args:
        provider: Source of the Environment that sizes the budget and delays
        on_retry: Optional hook receiving every RetryEvent before the wait
        sleep: Backoff wait coroutine (asyncio.sleep)
    """

    def __init__(
        self,
        provider: EnvironmentProvider,
        on_retry: Optional[RetryHook] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.provider = provider
        self.on_retry = on_retry
        self._sleep = sleep

    def should_retry(self, exc: BaseException) -> bool:
        return policy.is_retryable_failure(exc)

    def max_retries(self) -> int:
        """Retry budget for the provider's current environment."""
        return policy.max_attempts(self.provider.snapshot().environment)

    async def run(
        self,
        operation: Operation[T],
        operation_name: str = DEFAULT_OPERATION_NAME,
        max_retries: Optional[int] = None,
    ) -> T:
        """
        Await operation(), retrying transient failures.

        Args:
            operation: Zero-argument coroutine function, called once per attempt
            operation_name: Label used in logs and retry events
            max_retries: Override of the environment's retry budget

        Returns:
            The first successful result

        Raises:
            The original exception when it is not retryable or the budget is
            spent. Cancellation propagates immediately.
        """
        environment = self.provider.snapshot().environment
        budget = policy.max_attempts(environment) if max_retries is None else max_retries
        if budget < 0:
            raise ValueError("max_retries must be >= 0")

        for attempt_index in range(budget + 1):
            try:
                return await operation()
            except Exception as e:
                decision = policy.decide_for_exception(e, attempt_index, environment)

                if not decision.retryable or attempt_index >= budget:
                    logger.error(
                        f"Operation failed - {operation_name}",
                        operation=operation_name,
                        attempts=attempt_index + 1,
                        retryable=decision.retryable,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                    raise

                event = RetryEvent(
                    url=operation_name,
                    attempt=attempt_index + 1,
                    max_attempts=budget,
                    delay_ms=decision.delay_ms,
                    reason=type(e).__name__,
                )
                logger.warning(
                    f"Operation retry - {operation_name} (attempt {event.attempt}/{event.max_attempts})",
                    operation=operation_name,
                    delay_ms=event.delay_ms,
                    reason=event.reason,
                )
                self._notify(event)
                await self._sleep(decision.delay_seconds)

        # Should not reach here: the last attempt always returns or raises
        raise RuntimeError(f"retry loop for {operation_name} ended without a result")

    async def run_with_result(
        self,
        operation: Operation[T],
        operation_name: str = DEFAULT_OPERATION_NAME,
        max_retries: Optional[int] = None,
    ) -> OperationResult[T]:
        """Like run(), but returns failures as an OperationResult instead of raising."""
        try:
            value = await self.run(operation, operation_name, max_retries)
        except Exception as e:
            return OperationResult(error=e)
        return OperationResult(value=value)

    def _notify(self, event: RetryEvent) -> None:
        if self.on_retry is None:
            return
        try:
            self.on_retry(event)
        except Exception as e:
            logger.warning("Retry hook raised, ignoring", error=str(e), error_type=type(e).__name__)


async def retry_operation(
    operation: Operation[T],
    provider: EnvironmentProvider,
    operation_name: str = DEFAULT_OPERATION_NAME,
    max_retries: Optional[int] = None,
    sleep: SleepFunc = asyncio.sleep,
    on_retry: Optional[RetryHook] = None,
) -> T:
    """One-shot form of OperationRetrier(provider, ...).run(operation, ...)."""
    retrier = OperationRetrier(provider, on_retry=on_retry, sleep=sleep)
    return await retrier.run(operation, operation_name, max_retries)
