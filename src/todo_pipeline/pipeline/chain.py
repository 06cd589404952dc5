"""
Middleware composition for httpx transports.

A layer factory takes the transport it wraps and returns the wrapping
transport. compose() applies factories so the first one in the list ends up
outermost; iter_layers() walks the resulting chain through each layer's
`wrapped` attribute, outermost first.
"""

from typing import Callable, Iterator, Sequence

import httpx

LayerFactory = Callable[[httpx.AsyncBaseTransport], httpx.AsyncBaseTransport]


def compose(
    factories: Sequence[LayerFactory], transport: httpx.AsyncBaseTransport
) -> httpx.AsyncBaseTransport:
    """Wrap transport with factories; factories[0] becomes the outermost layer."""
    chain = transport
    for factory in reversed(factories):
        chain = factory(chain)
    return chain


def iter_layers(transport: httpx.AsyncBaseTransport) -> Iterator[httpx.AsyncBaseTransport]:
    """Yield every transport in the chain, outermost first."""
    current = transport
    while current is not None:
        yield current
        current = getattr(current, "wrapped", None)
