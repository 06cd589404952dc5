"""
Mock API layer.

Components:
- rules: MockEndpointRule table and first-match lookup
- payloads: Canned JSON bodies mirroring the real API
- router: route() dispatcher and MockRouterTransport
"""

from todo_pipeline.mock.router import MOCK_RULES, MockRouterTransport, route
from todo_pipeline.mock.rules import MockContext, MockEndpointRule, build_rule_table, match_rule

__all__ = [
    "MOCK_RULES",
    "MockRouterTransport",
    "route",
    "MockContext",
    "MockEndpointRule",
    "build_rule_table",
    "match_rule",
]
