"""
Retry metadata tracking.

Ephemeral records describing one logical call: each attempt, each retry
notification, and the final summary handed to the diagnostics sink.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from todo_pipeline.models.enums import AttemptOutcome, Environment


class RequestAttempt(BaseModel):
    """One pass through the inner chain."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, description="Zero-based attempt index")
    started_at: datetime = Field(..., description="Wall-clock start of the attempt")
    outcome: AttemptOutcome
    status_code: Optional[int] = Field(default=None, description="Status, when a response was returned")
    error_type: Optional[str] = Field(default=None, description="Exception class name, when raised")


class RetryEvent(BaseModel):
    """Emitted before the backoff wait that precedes a retry."""
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Request URL, or operation name for operation-level retries")
    attempt: int = Field(..., ge=1, description="Number of the upcoming retry (1-based)")
    max_attempts: int = Field(..., ge=1)
    delay_ms: int = Field(..., ge=0)
    reason: str = Field(..., description="Status code or exception class that triggered the retry")


@dataclass(frozen=True)
class CallSummary:
    """
    History of one logical call for diagnostics.

    Attributes:
        environment: Environment whose policy governed every attempt
        attempts: Attempts in order (index 0 first)
        total_latency_ms: Wall time from first attempt to final result (ms)
    """

    environment: Environment
    attempts: list[RequestAttempt] = field(default_factory=list)
    total_latency_ms: int = 0

    def __post_init__(self) -> None:
        """Validate summary invariants."""
        if not self.attempts:
            raise ValueError("attempts must not be empty")

        if self.total_latency_ms < 0:
            raise ValueError("total_latency_ms must be >= 0")

        indexes = [a.index for a in self.attempts]
        if indexes != list(range(len(indexes))):
            raise ValueError(f"attempt indexes must be contiguous from 0, got {indexes}")

    @property
    def total_attempts(self) -> int:
        return len(self.attempts)

    @property
    def retries(self) -> int:
        return len(self.attempts) - 1

    @property
    def final_outcome(self) -> AttemptOutcome:
        return self.attempts[-1].outcome
