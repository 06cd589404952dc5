"""
Unit tests for OperationRetrier.

Tests the retry budget, exception identity, retry events and the
result-wrapping variant for non-HTTP operations.
"""

import asyncio

import httpx
import pytest
from structlog.testing import capture_logs

from todo_pipeline.models.enums import Environment
from todo_pipeline.retry.operation import OperationResult, OperationRetrier, retry_operation


class FlakyOperation:
    """Raises the given exceptions in order, then returns result."""

    def __init__(self, *errors: Exception, result: object = "done"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class AlwaysFailing:
    def __init__(self, error: Exception):
        self.error = error
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        raise self.error


# ============================================================================
# Budget & Outcomes
# ============================================================================


@pytest.mark.asyncio
async def test_success_on_first_attempt(make_provider, sleep_recorder):
    operation = FlakyOperation()
    retrier = OperationRetrier(make_provider(), sleep=sleep_recorder)

    assert await retrier.run(operation, operation_name="sync_tasks") == "done"
    assert operation.calls == 1
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_recovers_after_transient_failures(make_provider, sleep_recorder):
    operation = FlakyOperation(httpx.ConnectError("refused"), TimeoutError())
    retrier = OperationRetrier(make_provider(Environment.PRODUCTION), sleep=sleep_recorder)

    assert await retrier.run(operation) == "done"
    assert operation.calls == 3
    assert sleep_recorder.delays == [1.0, 2.0]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "environment,expected_calls",
    [(Environment.MOCK, 2), (Environment.DEVELOPMENT, 3), (Environment.PRODUCTION, 4)],
)
async def test_budget_follows_environment(environment, expected_calls, make_provider, sleep_recorder):
    error = httpx.ReadTimeout("slow")
    operation = AlwaysFailing(error)
    retrier = OperationRetrier(make_provider(environment), sleep=sleep_recorder)

    with pytest.raises(httpx.ReadTimeout) as exc_info:
        await retrier.run(operation)

    assert exc_info.value is error
    assert operation.calls == expected_calls
    assert len(sleep_recorder.delays) == expected_calls - 1


@pytest.mark.asyncio
async def test_explicit_max_retries_overrides_environment(make_provider, sleep_recorder):
    operation = AlwaysFailing(httpx.ConnectError("refused"))
    retrier = OperationRetrier(make_provider(Environment.PRODUCTION), sleep=sleep_recorder)

    with pytest.raises(httpx.ConnectError):
        await retrier.run(operation, max_retries=1)

    assert operation.calls == 2


@pytest.mark.asyncio
async def test_zero_retries_makes_single_attempt(make_provider, sleep_recorder):
    operation = AlwaysFailing(httpx.ConnectError("refused"))
    retrier = OperationRetrier(make_provider(), sleep=sleep_recorder)

    with pytest.raises(httpx.ConnectError):
        await retrier.run(operation, max_retries=0)

    assert operation.calls == 1
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_negative_max_retries_rejected(make_provider):
    with pytest.raises(ValueError):
        await OperationRetrier(make_provider()).run(FlakyOperation(), max_retries=-1)


@pytest.mark.asyncio
async def test_non_retryable_failure_raised_immediately(make_provider, sleep_recorder):
    error = KeyError("userId")
    operation = AlwaysFailing(error)
    retrier = OperationRetrier(make_provider(), sleep=sleep_recorder)

    with capture_logs() as logs:
        with pytest.raises(KeyError) as exc_info:
            await retrier.run(operation, operation_name="load_profile")

    assert exc_info.value is error
    assert operation.calls == 1
    assert logs[-1]["event"] == "Operation failed - load_profile"
    assert logs[-1]["log_level"] == "error"


@pytest.mark.asyncio
async def test_cancellation_propagates(make_provider):
    async def cancelled_sleep(seconds):
        raise asyncio.CancelledError()

    operation = AlwaysFailing(httpx.ConnectError("refused"))
    retrier = OperationRetrier(make_provider(), sleep=cancelled_sleep)

    with pytest.raises(asyncio.CancelledError):
        await retrier.run(operation)

    assert operation.calls == 1


# ============================================================================
# Retry Events
# ============================================================================


@pytest.mark.asyncio
async def test_retry_events_and_logs(make_provider, sleep_recorder):
    events = []
    operation = AlwaysFailing(httpx.ConnectTimeout("timed out"))
    retrier = OperationRetrier(
        make_provider(Environment.DEVELOPMENT), on_retry=events.append, sleep=sleep_recorder
    )

    with capture_logs() as logs:
        with pytest.raises(httpx.ConnectTimeout):
            await retrier.run(operation, operation_name="sync_tasks")

    assert [(e.url, e.attempt, e.max_attempts, e.delay_ms) for e in events] == [
        ("sync_tasks", 1, 2, 500),
        ("sync_tasks", 2, 2, 1000),
    ]
    assert all(e.reason == "ConnectTimeout" for e in events)
    retry_logs = [entry for entry in logs if entry["event"].startswith("Operation retry - sync_tasks")]
    assert [entry["event"] for entry in retry_logs] == [
        "Operation retry - sync_tasks (attempt 1/2)",
        "Operation retry - sync_tasks (attempt 2/2)",
    ]


@pytest.mark.asyncio
async def test_raising_hook_is_ignored(make_provider, sleep_recorder):
    def bad_hook(event):
        raise RuntimeError("hook down")

    operation = FlakyOperation(httpx.ConnectError("refused"))
    retrier = OperationRetrier(make_provider(), on_retry=bad_hook, sleep=sleep_recorder)

    assert await retrier.run(operation) == "done"
    assert operation.calls == 2


# ============================================================================
# run_with_result / helpers
# ============================================================================


@pytest.mark.asyncio
async def test_run_with_result_wraps_success(make_provider, sleep_recorder):
    retrier = OperationRetrier(make_provider(), sleep=sleep_recorder)

    result = await retrier.run_with_result(FlakyOperation(result={"id": "task_1"}))

    assert result.is_success
    assert result.get_or_raise() == {"id": "task_1"}


@pytest.mark.asyncio
async def test_run_with_result_wraps_terminal_error(make_provider, sleep_recorder):
    error = httpx.ConnectError("refused")
    retrier = OperationRetrier(make_provider(Environment.MOCK), sleep=sleep_recorder)

    result = await retrier.run_with_result(AlwaysFailing(error))

    assert not result.is_success
    assert result.error is error
    assert result.value is None
    with pytest.raises(httpx.ConnectError):
        result.get_or_raise()


def test_should_retry_and_max_retries(make_provider):
    retrier = OperationRetrier(make_provider(Environment.DEVELOPMENT))

    assert retrier.should_retry(httpx.ConnectError("refused")) is True
    assert retrier.should_retry(ValueError("bad input")) is False
    assert retrier.should_retry(asyncio.CancelledError()) is False
    assert retrier.max_retries() == 2


def test_operation_result_defaults():
    assert OperationResult(value=3).is_success
    assert OperationResult(error=RuntimeError("x")).is_success is False


@pytest.mark.asyncio
async def test_retry_operation_function(make_provider, sleep_recorder):
    operation = FlakyOperation(httpx.ConnectError("refused"), result=42)

    value = await retry_operation(operation, make_provider(), "count_tasks", sleep=sleep_recorder)

    assert value == 42
    assert sleep_recorder.delays == [1.0]
