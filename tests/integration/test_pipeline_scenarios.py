"""
End-to-end scenarios through the fully composed pipeline.

Each test drives ApiPipeline.execute_with_retry() with a stub network
transport and checks the combined behavior of retry, logging and mock
routing.
"""

from unittest.mock import MagicMock

import httpx
import pytest
from structlog.testing import capture_logs

from todo_pipeline.environment import StaticEnvironmentProvider
from todo_pipeline.models.enums import AttemptOutcome, Environment, HttpMethod
from todo_pipeline.models.pipeline_config import PipelineConfig
from todo_pipeline.models.requests import ApiRequest
from todo_pipeline.pipeline.client import ApiPipeline


LIST_TASKS = ApiRequest(method=HttpMethod.GET, path="tasks")


def events(logs, prefix):
    return [entry for entry in logs if entry["event"].startswith(prefix)]


@pytest.mark.asyncio
async def test_persistent_503_is_returned_after_full_budget(test_settings, make_provider, sleep_recorder):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503, json={"success": False})

    sink = MagicMock()
    async with ApiPipeline(
        test_settings,
        provider=make_provider(Environment.PRODUCTION),
        transport=httpx.MockTransport(handler),
        diagnostics=sink,
        sleep=sleep_recorder,
    ) as pipeline:
        with capture_logs() as logs:
            response = await pipeline.execute_with_retry(LIST_TASKS)

    assert response.status_code == 503
    assert response.json() == {"success": False}
    assert len(calls) == 4
    assert sleep_recorder.delays == [1.0, 2.0, 4.0]

    # One request and one response record per attempt
    assert len(events(logs, "API Request - TASKS_LIST")) == 4
    assert len(events(logs, "❌ API Response - TASKS_LIST")) == 4

    summary = sink.call_failed.call_args.args[1]
    assert summary.total_attempts == 4
    assert summary.final_outcome is AttemptOutcome.TERMINAL_FAILURE


@pytest.mark.asyncio
async def test_streamed_body_survives_logging_and_retry(
    test_settings, make_provider, sleep_recorder, tracking_stream
):
    streams = []

    def handler(request):
        if not streams:
            stream = tracking_stream(b"busy")
            streams.append(stream)
            return httpx.Response(502, stream=stream)
        stream = tracking_stream(b'{"success": true, ', b'"data": {"tasks": []}}')
        streams.append(stream)
        return httpx.Response(200, headers={"Content-Type": "application/json"}, stream=stream)

    async with ApiPipeline(
        test_settings,
        provider=make_provider(Environment.DEVELOPMENT),
        transport=httpx.MockTransport(handler),
        sleep=sleep_recorder,
    ) as pipeline:
        with capture_logs() as logs:
            response = await pipeline.execute_with_retry(LIST_TASKS)

    assert response.json() == {"success": True, "data": {"tasks": []}}
    assert all(stream.closed for stream in streams)
    assert sleep_recorder.delays == [0.5]

    (success,) = events(logs, "✅ API Response - TASKS_LIST")
    assert success["body"] == '{"success": true, "data": {"tasks": []}}'


@pytest.mark.asyncio
async def test_timeouts_reraise_original_exception(test_settings, make_provider, sleep_recorder):
    error = httpx.ReadTimeout("The read operation timed out")
    retries = []

    def handler(request):
        raise error

    async with ApiPipeline(
        test_settings,
        provider=make_provider(Environment.MOCK),
        transport=httpx.MockTransport(handler),
        on_retry=retries.append,
        sleep=sleep_recorder,
    ) as pipeline:
        with capture_logs() as logs:
            with pytest.raises(httpx.ReadTimeout) as exc_info:
                await pipeline.execute_with_retry(LIST_TASKS)

    assert exc_info.value is error
    assert [(e.attempt, e.max_attempts, e.delay_ms) for e in retries] == [(1, 1, 100)]
    assert len(events(logs, "API Error - TASKS_LIST")) == 2


@pytest.mark.asyncio
async def test_mock_mode_answers_every_route_without_network(test_settings, make_provider):
    network_calls = []

    def handler(request):
        network_calls.append(request)
        return httpx.Response(200)

    async with ApiPipeline(
        test_settings,
        provider=make_provider(Environment.MOCK, mock_enabled=True),
        transport=httpx.MockTransport(handler),
    ) as pipeline:
        with capture_logs() as logs:
            login = await pipeline.execute_with_retry(
                ApiRequest(method=HttpMethod.POST, path="auth/login", json_body={"phoneNumber": "+15550100"})
            )
            analytics = await pipeline.execute_with_retry(
                ApiRequest(method=HttpMethod.GET, path="tasks/analytics")
            )
            missing = await pipeline.execute_with_retry(ApiRequest(method=HttpMethod.GET, path="reports"))

    assert network_calls == []
    assert login.json()["data"]["message"] == "OTP sent successfully"
    assert analytics.json()["data"]["completionRate"] == 60.0
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"

    # Mocked traffic is still logged
    assert len(events(logs, "✅ API Response - AUTH_LOGIN")) == 1
    assert len(events(logs, "❌ API Response - UNKNOWN_API")) == 1


@pytest.mark.asyncio
async def test_environment_swap_applies_to_next_call_only(test_settings, sleep_recorder):
    provider = StaticEnvironmentProvider(PipelineConfig(environment=Environment.PRODUCTION))
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500)

    async def swapping_sleep(seconds):
        await sleep_recorder(seconds)
        provider.swap(PipelineConfig(environment=Environment.MOCK))

    async with ApiPipeline(
        test_settings,
        provider=provider,
        transport=httpx.MockTransport(handler),
        sleep=swapping_sleep,
    ) as pipeline:
        first = await pipeline.execute_with_retry(LIST_TASKS)
        first_calls = len(calls)
        second = await pipeline.execute_with_retry(LIST_TASKS)

    assert first.status_code == 500
    assert first_calls == 4
    assert len(calls) - first_calls == 2
    assert sleep_recorder.delays == [1.0, 2.0, 4.0, 0.1]
