"""
Retry policy and orchestration for the request pipeline.

Main Components:
    - policy: Pure retryability / backoff decisions keyed by Environment
    - RetryTransport: Outermost httpx transport owning the attempt loop
    - OperationRetrier / retry_operation: Same policy for arbitrary awaitables
    - RequestAttempt, RetryEvent, CallSummary: Per-call history records

Usage:
    >>> from todo_pipeline.retry import policy
    >>> policy.compute_delay_ms(1, Environment.PRODUCTION)
    2000
"""

from todo_pipeline.retry import policy
from todo_pipeline.retry.engine import RetryTransport
from todo_pipeline.retry.metadata import CallSummary, RequestAttempt, RetryEvent
from todo_pipeline.retry.operation import OperationResult, OperationRetrier, retry_operation
from todo_pipeline.retry.policy import RetryDecision

__all__ = [
    "policy",
    "RetryTransport",
    "RetryDecision",
    "OperationRetrier",
    "OperationResult",
    "retry_operation",
    "CallSummary",
    "RequestAttempt",
    "RetryEvent",
]
