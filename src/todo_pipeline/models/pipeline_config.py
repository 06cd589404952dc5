"""
Immutable configuration snapshot read once per logical call.

Every layer and every attempt of one call sees the same snapshot, so the
retry budget, backoff limits and mock flag can never come from two
different environments mid-loop.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from todo_pipeline.models.enums import Environment

if TYPE_CHECKING:
    from todo_pipeline.config import Settings

# Key under which the snapshot travels in httpx.Request.extensions
CONFIG_EXTENSION_KEY = "todo_pipeline.config"


class PipelineConfig(BaseModel):
    """Environment and mock routing state in force for one call."""
    model_config = ConfigDict(frozen=True)

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Active environment")
    mock_enabled: bool = Field(default=False, description="Whether the mock router answers requests")
    base_url: str = Field(default="https://api.todoapp.com/v1/", description="API base URL")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "PipelineConfig":
        return cls(
            environment=settings.ENVIRONMENT,
            mock_enabled=settings.default_mock_enabled,
            base_url=settings.API_BASE_URL,
        )
