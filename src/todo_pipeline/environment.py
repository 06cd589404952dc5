"""
Environment providers: where the per-call PipelineConfig snapshot comes from.

The pipeline never reads ambient globals. It is handed an EnvironmentProvider
at build time and asks it for one snapshot per logical call. Runtime toggles
(the mock API override) replace the snapshot object; nothing is mutated in
place, so an in-flight call keeps the snapshot it started with.
"""

import json
import os
import tempfile
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Protocol

import structlog
from pydantic import BaseModel, ConfigDict

from todo_pipeline.config import Settings
from todo_pipeline.models.enums import Environment
from todo_pipeline.models.pipeline_config import PipelineConfig

logger = structlog.get_logger(__name__)

KEY_MOCK_API_ENABLED = "mock_api_enabled"
KEY_MOCK_API_OVERRIDE = "mock_api_override"


class EnvironmentProvider(Protocol):
    """Synchronous, cheap source of the active PipelineConfig."""

    def snapshot(self) -> PipelineConfig:
        ...


class StaticEnvironmentProvider:
    """Provider holding a single snapshot, replaceable as a whole."""

    def __init__(self, config: PipelineConfig):
        self._config = config

    def snapshot(self) -> PipelineConfig:
        return self._config

    def swap(self, config: PipelineConfig) -> PipelineConfig:
        """Install a new snapshot and return the previous one."""
        previous, self._config = self._config, config
        logger.info(
            "Pipeline config swapped",
            environment=config.environment.value,
            mock_enabled=config.mock_enabled,
        )
        return previous


class PreferencesStore:
    """
    Boolean preferences persisted as a small JSON document.

    Reads tolerate a missing or corrupt file (defaults are returned);
    writes replace the file atomically. Every call touches the disk, so
    callers on the request path should keep the result of load().
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> dict[str, bool]:
        """All boolean entries of the document; non-boolean values are dropped."""
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Unreadable preferences file, using defaults", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("Preferences file is not an object, using defaults", path=str(self.path))
            return {}
        return {key: value for key, value in data.items() if isinstance(value, bool)}

    def get_bool(self, key: str, default: bool) -> bool:
        return self.load().get(key, default)

    def put_bools(self, values: Mapping[str, bool]) -> dict[str, bool]:
        """Merge values into the document and return what was written."""
        data = self.load()
        data.update(values)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".prefs-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        return data


class MockApiStatus(BaseModel):
    """Current mock API state, for settings screens and debugging."""
    model_config = ConfigDict(frozen=True)

    is_enabled: bool
    has_override: bool
    default_state: bool
    current_state: bool
    environment: Environment


class MockApiManager:
    """
    Mock API switch with a persisted user override.

    Without an override the environment default applies (Settings.USE_MOCK_API,
    or MOCK environment). The preferences file is read once, on first use;
    after that snapshot() is served from memory. Setters write through to
    disk and then replace the cached preferences, so changes take effect on
    the next snapshot while calls already in flight keep theirs. Edits made
    to the file by another process are picked up on restart.
    """

    def __init__(self, settings: Settings, store: PreferencesStore | None = None):
        self.settings = settings
        self.store = store or PreferencesStore(settings.MOCK_PREFERENCES_PATH)
        self._preferences: Optional[Mapping[str, bool]] = None

    def _current(self) -> Mapping[str, bool]:
        if self._preferences is None:
            self._preferences = MappingProxyType(self.store.load())
            logger.debug("Mock API preferences loaded", path=str(self.store.path))
        return self._preferences

    def _write(self, values: Mapping[str, bool]) -> None:
        self._preferences = MappingProxyType(self.store.put_bools(values))

    @property
    def default_state(self) -> bool:
        return self.settings.default_mock_enabled

    @property
    def is_mock_api_enabled(self) -> bool:
        return self._effective(self._current())

    def _effective(self, preferences: Mapping[str, bool]) -> bool:
        # Override flag and stored state come from the same mapping
        if preferences.get(KEY_MOCK_API_OVERRIDE, False):
            return preferences.get(KEY_MOCK_API_ENABLED, self.default_state)
        return self.default_state

    def set_mock_api_enabled(self, enabled: bool, override: bool = True) -> None:
        self._write({
            KEY_MOCK_API_ENABLED: enabled,
            KEY_MOCK_API_OVERRIDE: override,
        })
        logger.info("Mock API preference updated", enabled=enabled, override=override)

    def toggle_mock_api(self) -> bool:
        """Flip the effective state (as an override) and return the new value."""
        new_state = not self.is_mock_api_enabled
        self.set_mock_api_enabled(new_state)
        return new_state

    def reset_to_default(self) -> None:
        self._write({KEY_MOCK_API_OVERRIDE: False})
        logger.info("Mock API preference reset to default", default_state=self.default_state)

    def status(self) -> MockApiStatus:
        preferences = self._current()
        return MockApiStatus(
            is_enabled=self._effective(preferences),
            has_override=preferences.get(KEY_MOCK_API_OVERRIDE, False),
            default_state=self.default_state,
            current_state=preferences.get(KEY_MOCK_API_ENABLED, self.default_state),
            environment=self.settings.ENVIRONMENT,
        )

    def debug_info(self) -> str:
        status = self.status()
        return "\n".join([
            "Mock API Configuration:",
            f"- Environment: {status.environment.value}",
            f"- Default State: {status.default_state}",
            f"- Has Override: {status.has_override}",
            f"- Current State: {status.current_state}",
            f"- Is Enabled: {status.is_enabled}",
            f"- Base URL: {self.settings.API_BASE_URL}",
        ])

    def snapshot(self) -> PipelineConfig:
        return PipelineConfig(
            environment=self.settings.ENVIRONMENT,
            mock_enabled=self._effective(self._current()),
            base_url=self.settings.API_BASE_URL,
        )
