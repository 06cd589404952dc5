"""
Mock router: the innermost pipeline layer.

When the call's PipelineConfig has mock_enabled set, MockRouterTransport
answers from the static rule table and never touches the network. Unmatched
routes produce a normal 404 response with a NOT_FOUND error envelope; routing
itself never raises. With mock routing off, requests pass straight through to
the wrapped (network) transport.

The router does not log; traffic logging is the outer layer's concern.
"""

from typing import Optional

import httpx

from todo_pipeline.mock import payloads
from todo_pipeline.mock.rules import (
    MockContext,
    MockEndpointRule,
    build_rule_table,
    match_rule,
)
from todo_pipeline.models.enums import HttpMethod
from todo_pipeline.models.pipeline_config import CONFIG_EXTENSION_KEY, PipelineConfig

MOCK_RULES: tuple[MockEndpointRule, ...] = build_rule_table(
    # Auth
    MockEndpointRule("/auth/login", HttpMethod.POST, payloads.login),
    MockEndpointRule("/auth/verify-otp", HttpMethod.POST, payloads.verify_otp),
    MockEndpointRule("/auth/logout", HttpMethod.POST, payloads.logout),
    # Tasks
    MockEndpointRule("/tasks/analytics", HttpMethod.GET, payloads.task_analytics),
    MockEndpointRule("/tasks/search", HttpMethod.GET, payloads.task_search),
    MockEndpointRule("/tasks/bulk", HttpMethod.POST, payloads.bulk_operation),
    MockEndpointRule("/tasks", HttpMethod.GET, payloads.task_list),
    MockEndpointRule("/tasks", HttpMethod.POST, payloads.create_task, status_code=201),
    MockEndpointRule("/tasks", HttpMethod.PUT, payloads.update_task),
    MockEndpointRule("/tasks", HttpMethod.PATCH, payloads.complete_task),
    MockEndpointRule("/tasks", HttpMethod.DELETE, payloads.delete_task),
    # Categories
    MockEndpointRule("/categories", HttpMethod.GET, payloads.category_list),
    MockEndpointRule("/categories", HttpMethod.POST, payloads.create_category, status_code=201),
    MockEndpointRule("/categories", HttpMethod.PUT, payloads.update_category),
    MockEndpointRule("/categories", HttpMethod.DELETE, payloads.delete_category),
    # Feedback
    MockEndpointRule("/feedback/analytics", HttpMethod.GET, payloads.feedback_analytics),
    MockEndpointRule("/feedback", HttpMethod.POST, payloads.submit_feedback, status_code=201),
    MockEndpointRule("/feedback", HttpMethod.GET, payloads.feedback_list),
)


def route(
    method: str,
    path: str,
    body: bytes = b"",
    rules: tuple[MockEndpointRule, ...] = MOCK_RULES,
    request: Optional[httpx.Request] = None,
) -> httpx.Response:
    """
    Synthesize the canned response for (method, path).

    Args:
        method: HTTP method
        path: URL path (substring-matched against the rule table)
        body: Raw request body, used by builders that echo identifiers
        rules: Ordered rule table (first match wins)
        request: Request to attach to the response, if any

    Returns:
        httpx.Response with a JSON body; 404 NOT_FOUND when nothing matches
    """
    rule = match_rule(method, path, rules)
    if rule is None:
        return httpx.Response(404, json=payloads.not_found(path), request=request)

    ctx = MockContext(method=method.upper(), path=path, body=body)
    return httpx.Response(rule.status_code, json=rule.builder(ctx), request=request)


class MockRouterTransport(httpx.AsyncBaseTransport):
    """
    httpx transport that short-circuits to canned responses in mock mode.

    Args:
        wrapped: Real network transport used when mock routing is off
        rules: Ordered rule table
        mock_by_default: Mock state used when the request carries no
            PipelineConfig snapshot (router used outside RetryTransport)
    """

    def __init__(
        self,
        wrapped: httpx.AsyncBaseTransport,
        rules: tuple[MockEndpointRule, ...] = MOCK_RULES,
        mock_by_default: bool = False,
    ):
        self.wrapped = wrapped
        self.rules = rules
        self.mock_by_default = mock_by_default

    def _mock_enabled(self, request: httpx.Request) -> bool:
        config: Optional[PipelineConfig] = request.extensions.get(CONFIG_EXTENSION_KEY)
        if config is None:
            return self.mock_by_default
        return config.mock_enabled

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if not self._mock_enabled(request):
            return await self.wrapped.handle_async_request(request)

        body = await request.aread()
        return route(request.method, request.url.path, body, self.rules, request=request)

    async def aclose(self) -> None:
        await self.wrapped.aclose()
