"""
Enumerations for pipeline data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class Environment(str, Enum):
    """
    Deployment environment of the running process.

    Drives the retry budget and backoff limits. STAGING is reserved and
    falls back to the production policy values.
    """

    MOCK = "MOCK"
    DEVELOPMENT = "DEVELOPMENT"
    STAGING = "STAGING"
    PRODUCTION = "PRODUCTION"

    @classmethod
    def parse(cls, value: str) -> "Environment":
        """Parse an environment name, defaulting to DEVELOPMENT when unknown."""
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.DEVELOPMENT


class HttpMethod(str, Enum):
    """HTTP methods accepted by the request descriptor."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class AttemptOutcome(str, Enum):
    """Result of a single attempt inside one logical call."""

    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"
    TERMINAL_FAILURE = "terminal_failure"


class LogDirection(str, Enum):
    """Direction of a traffic log record."""

    REQUEST = "request"
    RESPONSE = "response"
    ERROR = "error"
