"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

from typing import Callable

import httpx
import pytest
import structlog

from todo_pipeline.config import Settings
from todo_pipeline.environment import StaticEnvironmentProvider
from todo_pipeline.models.enums import Environment
from todo_pipeline.models.pipeline_config import PipelineConfig

BASE_URL = "https://api.todoapp.com/v1/"


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test performed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Test settings with safe defaults for local testing.

    Production policy, real (non-mock) routing, metrics off, preferences
    stored in a per-test temporary directory.
    """
    return Settings(
        APP_NAME="Todo API Pipeline (Test)",
        ENVIRONMENT="PRODUCTION",
        LOG_LEVEL="DEBUG",
        API_BASE_URL=BASE_URL,
        USE_MOCK_API=False,
        ENABLE_API_LOGGING=True,
        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
        MOCK_PREFERENCES_PATH=str(tmp_path / "mock_api_preferences.json"),
    )


@pytest.fixture
def make_provider():
    """Factory fixture for a StaticEnvironmentProvider.

    Usage:
        def test_something(make_provider):
            provider = make_provider(Environment.MOCK, mock_enabled=True)
    """
    def _create(
        environment: Environment = Environment.PRODUCTION,
        mock_enabled: bool = False,
    ) -> StaticEnvironmentProvider:
        return StaticEnvironmentProvider(
            PipelineConfig(environment=environment, mock_enabled=mock_enabled, base_url=BASE_URL)
        )

    return _create


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


class TrackingStream(httpx.AsyncByteStream):
    """Async response stream that yields chunks and records aclose()."""

    def __init__(self, *chunks: bytes):
        self.chunks = chunks
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def tracking_stream() -> Callable[..., TrackingStream]:
    """Factory for streamed (unread) response bodies."""
    return TrackingStream
