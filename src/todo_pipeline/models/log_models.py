"""
Observational traffic log records.

Never persisted: a LogEntry is rendered through structlog and dropped.
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, Field

from todo_pipeline.models.enums import LogDirection


class LogEntry(BaseModel):
    """Single request or response record emitted by the traffic logger."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    direction: LogDirection = Field(..., description="request, response or error")
    api_name: str = Field(..., description="Endpoint-derived label (e.g. TASKS_LIST)")
    method: str = Field(..., description="HTTP method")
    url: str = Field(..., description="Full request URL")
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = Field(default=None, description="Decoded, truncated body")
    status_code: Optional[int] = Field(default=None)
    reason_phrase: Optional[str] = Field(default=None)
    duration: Optional[str] = Field(default=None, description="Formatted elapsed time")
    duration_ms: Optional[int] = Field(default=None, ge=0)
    status_icon: Optional[str] = Field(default=None, description="Success/failure marker")
    error: Optional[str] = Field(default=None)

    def to_log_fields(self) -> Dict[str, object]:
        """Fields for a structlog call (event name is chosen by the caller)."""
        fields = self.model_dump(mode="json", exclude_none=True)
        fields.pop("timestamp", None)
        return fields
