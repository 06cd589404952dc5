"""
Data models for the request pipeline.

Modules:
- enums: Environment, HttpMethod, AttemptOutcome, LogDirection
- requests: ApiRequest descriptor
- pipeline_config: PipelineConfig per-call snapshot
- log_models: LogEntry traffic records
"""

from todo_pipeline.models.enums import AttemptOutcome, Environment, HttpMethod, LogDirection
from todo_pipeline.models.log_models import LogEntry
from todo_pipeline.models.pipeline_config import CONFIG_EXTENSION_KEY, PipelineConfig
from todo_pipeline.models.requests import ApiRequest

__all__ = [
    "AttemptOutcome",
    "Environment",
    "HttpMethod",
    "LogDirection",
    "LogEntry",
    "CONFIG_EXTENSION_KEY",
    "PipelineConfig",
    "ApiRequest",
]
