"""
Mock endpoint rule table.

A MockEndpointRule maps (path substring, method) to a payload builder and a
status code. Rule tables built with build_rule_table are ordered longest path
first, so a specific path such as /tasks/analytics is always tried before
its /tasks prefix. The sort is stable: rules with equal path lengths keep
their declared order.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from todo_pipeline.models.enums import HttpMethod


@dataclass(frozen=True)
class MockContext:
    """What a payload builder may see of the request."""

    method: str
    path: str
    body: bytes = b""

    @property
    def json_body(self) -> Any:
        """Decoded JSON body, or None when absent or not JSON."""
        if not self.body:
            return None
        try:
            return json.loads(self.body)
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None

    def resource_id(self, collection: str) -> Optional[str]:
        """Identifier following /<collection>/ in the path (e.g. tasks/abc/complete -> abc)."""
        segments = [s for s in self.path.split("/") if s]
        try:
            position = segments.index(collection)
        except ValueError:
            return None
        if position + 1 < len(segments):
            return segments[position + 1]
        return None


PayloadBuilder = Callable[[MockContext], Dict[str, Any]]


@dataclass(frozen=True)
class MockEndpointRule:
    """Static (path substring, method) -> canned response mapping."""

    path: str
    method: HttpMethod
    builder: PayloadBuilder
    status_code: int = 200

    def matches(self, method: str, path: str) -> bool:
        return method.upper() == self.method.value and self.path in path


def build_rule_table(*rules: MockEndpointRule) -> tuple[MockEndpointRule, ...]:
    """Order rules most specific (longest path) first."""
    return tuple(sorted(rules, key=lambda rule: len(rule.path), reverse=True))


def match_rule(
    method: str, path: str, rules: tuple[MockEndpointRule, ...]
) -> Optional[MockEndpointRule]:
    """First matching rule, or None."""
    for rule in rules:
        if rule.matches(method, path):
            return rule
    return None
