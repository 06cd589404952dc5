"""
Request descriptor consumed by the pipeline entry point.

The descriptor is transport-agnostic: the pipeline turns it into an
httpx.Request relative to the configured API base URL.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from todo_pipeline.models.enums import HttpMethod


class ApiRequest(BaseModel):
    """
    One logical API call.

    The pipeline may send it several times (retries), so bodies are held
    as values rather than streams.
    """
    model_config = ConfigDict(frozen=True)

    method: HttpMethod = Field(..., description="HTTP method")
    path: str = Field(..., min_length=1, description="Path relative to the API base URL (e.g. 'tasks/123')")
    params: Dict[str, Any] = Field(default_factory=dict, description="Query parameters")
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra request headers")
    json_body: Optional[Any] = Field(default=None, description="JSON-serializable body")
    content: Optional[bytes] = Field(default=None, description="Raw body bytes")

    @model_validator(mode="after")
    def _single_body(self) -> "ApiRequest":
        if self.json_body is not None and self.content is not None:
            raise ValueError("json_body and content are mutually exclusive")
        return self

    @property
    def relative_path(self) -> str:
        """Path without leading slash, so it joins onto the base URL path."""
        return self.path.lstrip("/")
