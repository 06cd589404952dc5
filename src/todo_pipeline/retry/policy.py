"""
Retry policy: pure retryability and backoff decisions.

Nothing here performs I/O or holds mutable state, so every function is
safe to call from any number of concurrent calls.

Policy table (per Environment):

    Environment   max_attempts   initial_delay   max_delay
    MOCK          1              100ms           1000ms
    DEVELOPMENT   2              500ms           5000ms
    PRODUCTION    3              1000ms          10000ms
    (other)       3              1000ms          10000ms

Backoff: min(initial_delay * 2 ** attempt_index, max_delay), with a
zero-based attempt index, so the first retry waits exactly initial_delay.
"""

import errno
import socket
from dataclasses import dataclass

import httpx

from todo_pipeline.models.enums import Environment

BACKOFF_MULTIPLIER = 2.0

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY_MS = 1000
DEFAULT_MAX_DELAY_MS = 10000

RETRYABLE_STATUS_CODES = frozenset({
    500,  # Internal Server Error
    502,  # Bad Gateway
    503,  # Service Unavailable
    504,  # Gateway Timeout
    429,  # Too Many Requests
})

# Known heuristic: any exception whose message contains one of these words
# is treated as retryable. It can match unrelated error text (e.g. a
# validation message mentioning "network"); kept permissive on purpose.
RETRYABLE_MESSAGE_PATTERNS = frozenset({
    "timeout",
    "connection",
    "network",
    "unreachable",
    "refused",
    "reset",
})

# Timeout, unknown host and connection refused families
RETRYABLE_EXCEPTION_TYPES: tuple[type[BaseException], ...] = (
    httpx.TimeoutException,
    httpx.ConnectError,
    TimeoutError,
    ConnectionRefusedError,
    socket.gaierror,
)

# No route to host
_UNREACHABLE_ERRNOS = frozenset({errno.EHOSTUNREACH, errno.ENETUNREACH})

_MAX_ATTEMPTS = {
    Environment.MOCK: 1,
    Environment.DEVELOPMENT: 2,
    Environment.PRODUCTION: DEFAULT_MAX_ATTEMPTS,
}

_INITIAL_DELAY_MS = {
    Environment.MOCK: 100,
    Environment.DEVELOPMENT: 500,
    Environment.PRODUCTION: DEFAULT_INITIAL_DELAY_MS,
}

_MAX_DELAY_MS = {
    Environment.MOCK: 1000,
    Environment.DEVELOPMENT: 5000,
    Environment.PRODUCTION: DEFAULT_MAX_DELAY_MS,
}


@dataclass(frozen=True)
class RetryDecision:
    """Tagged outcome of a retryability check."""

    retryable: bool
    delay_ms: int = 0

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000.0


def is_retryable_status(status_code: int) -> bool:
    """True iff the status is a transient server condition (5xx subset or 429)."""
    return status_code in RETRYABLE_STATUS_CODES


def is_retryable_failure(exc: BaseException) -> bool:
    """
    Classify a transport exception as transient or permanent.

    Typed checks first (timeout, unknown host, refused, no route to host);
    otherwise falls back to sniffing the lowercased message for
    RETRYABLE_MESSAGE_PATTERNS. Cancellation is never retryable.
    """
    if not isinstance(exc, Exception):
        return False
    if isinstance(exc, RETRYABLE_EXCEPTION_TYPES):
        return True
    if isinstance(exc, OSError) and exc.errno in _UNREACHABLE_ERRNOS:
        return True

    message = str(exc).lower()
    return any(pattern in message for pattern in RETRYABLE_MESSAGE_PATTERNS)


def max_attempts(environment: Environment) -> int:
    """Retry budget: number of retries after the first attempt."""
    return _MAX_ATTEMPTS.get(environment, DEFAULT_MAX_ATTEMPTS)


def initial_delay_ms(environment: Environment) -> int:
    return _INITIAL_DELAY_MS.get(environment, DEFAULT_INITIAL_DELAY_MS)


def max_delay_ms(environment: Environment) -> int:
    return _MAX_DELAY_MS.get(environment, DEFAULT_MAX_DELAY_MS)


def compute_delay_ms(attempt_index: int, environment: Environment) -> int:
    """Exponential backoff delay in milliseconds, capped at max_delay_ms."""
    if attempt_index < 0:
        raise ValueError("attempt_index must be >= 0")
    cap = max_delay_ms(environment)
    # Cap the exponent first; 2 ** large would overflow float multiplication
    if attempt_index >= 64:
        return cap
    delay = int(initial_delay_ms(environment) * BACKOFF_MULTIPLIER ** attempt_index)
    return min(delay, cap)


def decide_for_status(status_code: int, attempt_index: int, environment: Environment) -> RetryDecision:
    """Retry decision for a response status observed on attempt_index."""
    if not is_retryable_status(status_code):
        return RetryDecision(retryable=False)
    return RetryDecision(retryable=True, delay_ms=compute_delay_ms(attempt_index, environment))


def decide_for_exception(exc: BaseException, attempt_index: int, environment: Environment) -> RetryDecision:
    """Retry decision for a transport exception raised on attempt_index."""
    if not is_retryable_failure(exc):
        return RetryDecision(retryable=False)
    return RetryDecision(retryable=True, delay_ms=compute_delay_ms(attempt_index, environment))
