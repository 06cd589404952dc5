"""
Transport leg of the pipeline: the real network client and an adapter
for plain handler functions.
"""

from typing import Awaitable, Callable, Mapping, Optional

import httpx
import structlog

from todo_pipeline.config import Settings

logger = structlog.get_logger(__name__)

# (method, url, headers, body) -> (status_code, headers, body)
TransportHandler = Callable[
    [str, str, Mapping[str, str], bytes],
    Awaitable[tuple[int, Mapping[str, str], bytes]],
]


def build_network_transport(
    settings: Settings,
    connection_limits: Optional[httpx.Limits] = None,
) -> httpx.AsyncHTTPTransport:
    """
    Real HTTP transport with pooled connections.

    Per-phase timeouts are applied by the client (see ApiPipeline); the
    transport only owns the connection pool.
    """
    if connection_limits is None:
        connection_limits = httpx.Limits(
            max_keepalive_connections=settings.MAX_KEEPALIVE_CONNECTIONS,
            max_connections=settings.MAX_CONNECTIONS,
            keepalive_expiry=30.0,
        )
    logger.debug("Created network transport", connection_limits=str(connection_limits))
    return httpx.AsyncHTTPTransport(limits=connection_limits)


def build_timeout(settings: Settings) -> httpx.Timeout:
    return httpx.Timeout(
        connect=settings.CONNECT_TIMEOUT,
        read=settings.READ_TIMEOUT,
        write=settings.WRITE_TIMEOUT,
        pool=settings.CONNECT_TIMEOUT,
    )


class FunctionTransport(httpx.AsyncBaseTransport):
    """
    Adapts an async handler function into an httpx transport.

    The handler receives (method, url, headers, body) and returns
    (status_code, headers, body), or raises a transport exception which
    propagates unchanged.
    """

    def __init__(self, handler: TransportHandler):
        self.handler = handler

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        body = await request.aread()
        status_code, headers, content = await self.handler(
            request.method, str(request.url), dict(request.headers), body
        )
        return httpx.Response(
            status_code=status_code,
            headers=headers,
            stream=httpx.ByteStream(content),
            request=request,
        )
