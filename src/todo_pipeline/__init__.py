"""
HTTP request pipeline for the Todo API client.

Wraps every outgoing API call in an ordered chain of httpx transports:
- Retry orchestration with environment-tuned exponential backoff
- Traffic logging that never consumes the response seen by callers
- Mock routing that answers with canned payloads during development

Architecture: RetryTransport -> TrafficLoggingTransport -> MockRouterTransport -> network
"""

__version__ = "0.1.0"
