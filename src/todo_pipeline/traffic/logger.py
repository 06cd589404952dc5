"""
Traffic logging transport.

Sits between the retry orchestrator and the mock router, so it records each
attempt, mocked or real. The response body is buffered exactly once from the
raw stream and handed downstream as a fresh, unread httpx.Response built on
that buffer: logging never changes what the caller reads. Bytes are kept
encoded, so compressed bodies are still decoded downstream by httpx as usual.
"""

import time

import httpx
import structlog

from todo_pipeline.models.enums import LogDirection
from todo_pipeline.models.log_models import LogEntry
from todo_pipeline.traffic.formatting import (
    MAX_BODY_LENGTH,
    REQUEST_BODY_PLACEHOLDER,
    RESPONSE_BODY_PLACEHOLDER,
    extract_api_name,
    format_duration,
    status_icon,
    truncate_body,
)

logger = structlog.get_logger(__name__)


class TrafficLoggingTransport(httpx.AsyncBaseTransport):
    """
    httpx transport that logs request/response traffic transparently.

    Features:
    - Request record: method, URL, headers, UTF-8 body (truncated)
    - Response record: status, headers, body, formatted duration, icon
    - Error record for transport exceptions, which are re-raised unchanged
    - Body decode failures degrade to placeholders, never to errors
    """

    def __init__(self, wrapped: httpx.AsyncBaseTransport, max_body_length: int = MAX_BODY_LENGTH):
        self.wrapped = wrapped
        self.max_body_length = max_body_length

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        api_name = extract_api_name(str(request.url))
        self._log_request(request, api_name)

        start_time = time.perf_counter()
        try:
            response = await self.wrapped.handle_async_request(request)
        except Exception as e:
            self._log_error(request, api_name, int((time.perf_counter() - start_time) * 1000), e)
            raise
        duration_ms = int((time.perf_counter() - start_time) * 1000)

        return await self._log_response(request, response, api_name, duration_ms)

    def _log_error(
        self, request: httpx.Request, api_name: str, duration_ms: int, error: Exception
    ) -> None:
        entry = LogEntry(
            direction=LogDirection.ERROR,
            api_name=api_name,
            method=request.method,
            url=str(request.url),
            duration=format_duration(duration_ms),
            duration_ms=duration_ms,
            error=f"{type(error).__name__}: {error}",
        )
        logger.error(f"API Error - {api_name}", **entry.to_log_fields())

    def _log_request(self, request: httpx.Request, api_name: str) -> None:
        body = None
        try:
            raw = request.content
        except httpx.RequestNotRead:
            body = REQUEST_BODY_PLACEHOLDER
        else:
            if raw:
                try:
                    body = truncate_body(raw.decode("utf-8"), self.max_body_length)
                except UnicodeDecodeError:
                    body = REQUEST_BODY_PLACEHOLDER

        entry = LogEntry(
            direction=LogDirection.REQUEST,
            api_name=api_name,
            method=request.method,
            url=str(request.url),
            headers=dict(request.headers),
            body=body,
        )
        logger.debug(f"API Request - {api_name}", **entry.to_log_fields())

    async def _log_response(
        self,
        request: httpx.Request,
        response: httpx.Response,
        api_name: str,
        duration_ms: int,
    ) -> httpx.Response:
        try:
            response.content
        except httpx.ResponseNotRead:
            pass
        else:
            # Already buffered (e.g. mock responses): re-readable as-is
            body = truncate_body(response.text, self.max_body_length)
            self._emit_response(request, response, api_name, duration_ms, body)
            return response

        try:
            raw = b"".join([chunk async for chunk in response.aiter_raw()])
        except httpx.StreamError as e:
            # Stream consumed or closed elsewhere: keep the original object
            logger.debug("Response body not buffered", api_name=api_name, error=str(e))
            self._emit_response(request, response, api_name, duration_ms, RESPONSE_BODY_PLACEHOLDER)
            return response
        except Exception as e:
            # Partly consumed: the original can no longer be handed on
            await response.aclose()
            self._log_error(request, api_name, duration_ms, e)
            raise
        await response.aclose()

        fresh = httpx.Response(
            status_code=response.status_code,
            headers=response.headers,
            stream=httpx.ByteStream(raw),
            request=request,
            extensions=response.extensions,
        )
        self._emit_response(request, fresh, api_name, duration_ms, self._decode_body(response, raw))
        return fresh

    def _decode_body(self, response: httpx.Response, raw: bytes) -> str:
        """Decoded text of a buffered body, for logging only."""
        if not raw:
            return ""
        view = httpx.Response(
            status_code=response.status_code,
            headers=response.headers,
            stream=httpx.ByteStream(raw),
        )
        try:
            view.read()
        except httpx.DecodingError:
            return RESPONSE_BODY_PLACEHOLDER
        return truncate_body(view.text, self.max_body_length)

    def _emit_response(
        self,
        request: httpx.Request,
        response: httpx.Response,
        api_name: str,
        duration_ms: int,
        body: str,
    ) -> None:
        icon = status_icon(response.is_success)
        duration = format_duration(duration_ms)
        entry = LogEntry(
            direction=LogDirection.RESPONSE,
            api_name=api_name,
            method=request.method,
            url=str(request.url),
            headers=dict(response.headers),
            body=body or None,
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            duration=duration,
            duration_ms=duration_ms,
            status_icon=icon,
        )
        logger.debug(f"{icon} API Response - {api_name} ({duration})", **entry.to_log_fields())

    async def aclose(self) -> None:
        await self.wrapped.aclose()
