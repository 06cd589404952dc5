"""
Pipeline composition and entry point.

Components:
- ApiPipeline: execute_with_retry() over the composed transport chain
- compose / iter_layers: Generic middleware composition for httpx transports
- FunctionTransport: Adapter for plain (method, url, headers, body) handlers
"""

from todo_pipeline.pipeline.chain import LayerFactory, compose, iter_layers
from todo_pipeline.pipeline.client import ApiPipeline
from todo_pipeline.pipeline.transports import (
    FunctionTransport,
    build_network_transport,
    build_timeout,
)

__all__ = [
    "ApiPipeline",
    "LayerFactory",
    "compose",
    "iter_layers",
    "FunctionTransport",
    "build_network_transport",
    "build_timeout",
]
