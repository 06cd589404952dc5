"""
Configuration settings for the Todo API pipeline.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from todo_pipeline.models.enums import Environment


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Todo API Pipeline"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: Environment = Environment.DEVELOPMENT
    LOG_LEVEL: str = "INFO"

    # === API ===
    API_BASE_URL: str = "https://api.todoapp.com/v1/"
    USE_MOCK_API: Optional[bool] = None  # None: mock iff ENVIRONMENT is MOCK
    ENABLE_API_LOGGING: bool = True
    LOG_MAX_BODY_LENGTH: int = 4000  # chars

    # === Timeouts (seconds) ===
    CONNECT_TIMEOUT: float = 30.0
    READ_TIMEOUT: float = 30.0
    WRITE_TIMEOUT: float = 30.0

    # === Connection Pool ===
    MAX_CONNECTIONS: int = 10
    MAX_KEEPALIVE_CONNECTIONS: int = 5

    # === Mock API Override ===
    MOCK_PREFERENCES_PATH: str = ".todo_pipeline/mock_api_preferences.json"

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True

    @field_validator("ENVIRONMENT", mode="before")
    @classmethod
    def _parse_environment(cls, value: object) -> Environment:
        if isinstance(value, Environment):
            return value
        return Environment.parse(str(value))

    @property
    def default_mock_enabled(self) -> bool:
        """Mock routing state when no user override is stored."""
        if self.USE_MOCK_API is None:
            return self.ENVIRONMENT is Environment.MOCK
        return self.USE_MOCK_API


# Global settings instance
settings = Settings()
