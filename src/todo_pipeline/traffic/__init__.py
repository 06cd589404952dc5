"""
Traffic logging layer.

Components:
- TrafficLoggingTransport: Response-stream-safe request/response logger
- formatting: Endpoint labels, body truncation, duration formatting
"""

from todo_pipeline.traffic.formatting import (
    MAX_BODY_LENGTH,
    TRUNCATION_MARKER,
    extract_api_name,
    format_duration,
    truncate_body,
)
from todo_pipeline.traffic.logger import TrafficLoggingTransport

__all__ = [
    "TrafficLoggingTransport",
    "MAX_BODY_LENGTH",
    "TRUNCATION_MARKER",
    "extract_api_name",
    "format_duration",
    "truncate_body",
]
