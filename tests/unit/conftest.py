"""Unit test fixtures (stub transports).

Provides stand-ins for network responses without external dependencies.
"""

from typing import Callable

import httpx
import pytest


@pytest.fixture
def counting_transport():
    """Factory for an httpx.MockTransport that counts invocations.

    Usage:
        transport, calls = counting_transport(lambda request, n: httpx.Response(503))
    """
    def _create(respond: Callable[[httpx.Request, int], httpx.Response]):
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return respond(request, len(calls))

        return httpx.MockTransport(handler), calls

    return _create
