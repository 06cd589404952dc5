"""
Pipeline entry point.

ApiPipeline composes the fixed layer order

    RetryTransport -> TrafficLoggingTransport -> MockRouterTransport -> network

and exposes execute_with_retry(), the single call the rest of the
application uses. The logging layer is left out when ENABLE_API_LOGGING is
off; the order of the remaining layers never changes.
"""

import asyncio
from typing import Optional

import httpx
import structlog

from todo_pipeline.config import Settings
from todo_pipeline.environment import (
    EnvironmentProvider,
    MockApiManager,
    StaticEnvironmentProvider,
)
from todo_pipeline.mock.router import MockRouterTransport
from todo_pipeline.models.pipeline_config import PipelineConfig
from todo_pipeline.models.requests import ApiRequest
from todo_pipeline.monitoring.diagnostics import DiagnosticsSink, MetricsDiagnosticsSink
from todo_pipeline.pipeline.chain import LayerFactory, compose, iter_layers
from todo_pipeline.pipeline.transports import build_network_transport, build_timeout
from todo_pipeline.retry.engine import RetryHook, RetryTransport, SleepFunc
from todo_pipeline.traffic.logger import TrafficLoggingTransport

logger = structlog.get_logger(__name__)


class ApiPipeline:
    """
    Retrying, logging, mock-aware API client.

    Args:
        settings: Application settings (base URL, timeouts, logging switch)
        provider: Per-call config source; defaults to a static snapshot of settings
        transport: Network transport; defaults to a pooled httpx.AsyncHTTPTransport
        diagnostics: Telemetry sink; defaults to MetricsDiagnosticsSink
        on_retry: Hook receiving each RetryEvent before its backoff
        sleep: Backoff wait coroutine (asyncio.sleep)
    """

    def __init__(
        self,
        settings: Settings,
        provider: Optional[EnvironmentProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
        on_retry: Optional[RetryHook] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.settings = settings
        self.provider = provider or StaticEnvironmentProvider(PipelineConfig.from_settings(settings))
        self.diagnostics = diagnostics or MetricsDiagnosticsSink(
            metrics_enabled=settings.PROMETHEUS_ENABLED
        )

        factories: list[LayerFactory] = [
            lambda inner: RetryTransport(
                inner, self.provider, diagnostics=self.diagnostics, on_retry=on_retry, sleep=sleep
            ),
        ]
        if settings.ENABLE_API_LOGGING:
            factories.append(
                lambda inner: TrafficLoggingTransport(inner, max_body_length=settings.LOG_MAX_BODY_LENGTH)
            )
        factories.append(lambda inner: MockRouterTransport(inner))

        self.transport = compose(factories, transport or build_network_transport(settings))
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            "API pipeline initialized",
            base_url=settings.API_BASE_URL,
            environment=settings.ENVIRONMENT.value,
            layers=[type(layer).__name__ for layer in self.layers],
        )

    @classmethod
    def with_mock_override(cls, settings: Settings, **kwargs) -> "ApiPipeline":
        """Pipeline whose mock routing honours the persisted MockApiManager override."""
        return cls(settings, provider=MockApiManager(settings), **kwargs)

    @property
    def layers(self) -> list[httpx.AsyncBaseTransport]:
        """Chain contract, outermost first."""
        return list(iter_layers(self.transport))

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.settings.API_BASE_URL,
                transport=self.transport,
                timeout=build_timeout(self.settings),
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def execute_with_retry(self, request: ApiRequest) -> httpx.Response:
        """
        Perform one logical API call through the whole pipeline.

        Returns:
            The final response, which may carry a non-2xx status (non-retryable
            error, or retryable status after the budget was spent)

        Raises:
            The original transport exception on terminal failure
        """
        client = self._get_client()
        http_request = client.build_request(
            request.method.value,
            request.relative_path,
            params=request.params or None,
            headers=request.headers or None,
            json=request.json_body,
            content=request.content,
        )
        return await client.send(http_request)

    async def aclose(self) -> None:
        """Close the HTTP client and every transport in the chain."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed API pipeline client")
        else:
            await self.transport.aclose()

    async def __aenter__(self) -> "ApiPipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
