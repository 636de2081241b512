"""Pydantic-based settings with layered loading.

Layers, highest priority first:

1. Explicit overrides (CLI flags, test fixtures)
2. Environment variables (``WORKLOG_API__BASE_URL=...``)
3. YAML config file (``--config``, ``./worklog.yaml`` or ``~/.worklog/config.yaml``)
4. Built-in defaults
"""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal

import httpx
import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from worklog.config.defaults import (
    DEFAULT_API_BASE_URL,
    DEFAULT_API_TIMEOUT,
    DEFAULT_RECONCILE_INTERVAL,
    DEFAULT_STATE_FILE,
    DEFAULT_TICK_INTERVAL,
    ENV_PREFIX,
    PROJECT_CONFIG_FILENAME,
    USER_CONFIG_PATH,
)


class ConfigFileError(Exception):
    """Raised when a config file exists but cannot be parsed."""


class GeneralSettings(BaseModel):
    verbosity: Literal["debug", "info", "warning", "error", "critical"] = "warning"
    output_format: Literal["text", "json"] = "text"
    color_enabled: bool = True
    log_file: Path | None = None

    @field_validator("verbosity", "output_format", mode="before")
    @classmethod
    def lowercase(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class ApiSettings(BaseModel):
    """Connection to the remote time-log service."""

    base_url: str = DEFAULT_API_BASE_URL
    timeout: float = Field(default=DEFAULT_API_TIMEOUT, gt=0)
    # Needed for the "assigned to me" task listing
    user_id: int | None = None
    token: str | None = None
    # Socket.IO "timerStopped" pushes; only the TUI keeps a connection open.
    push_enabled: bool = True
    push_url: str | None = None

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def resolved_push_url(self) -> str:
        """``push_url``, or the origin of ``base_url`` when unset."""
        if self.push_url:
            return self.push_url
        url = httpx.URL(self.base_url)
        return f"{url.scheme}://{url.netloc.decode('ascii')}"


class TimerSettings(BaseModel):
    tick_interval: float = Field(default=DEFAULT_TICK_INTERVAL, gt=0)
    # Seconds between background checks of the open log; 0 disables them.
    reconcile_interval: float = Field(default=DEFAULT_RECONCILE_INTERVAL, ge=0)
    state_file: Path = DEFAULT_STATE_FILE

    @field_validator("state_file", mode="after")
    @classmethod
    def expand_user(cls, value: Path) -> Path:
        return value.expanduser()


# File layer for the Settings instance currently being built.
_file_layer: ContextVar[dict[str, Any] | None] = ContextVar("file_layer", default=None)


class YamlFileSource(PydanticBaseSettingsSource):
    """Settings source fed from an already-parsed YAML document."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict[str, Any] | None):
        super().__init__(settings_cls)
        self._data = data or {}

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return {
            name: value
            for name, value in self._data.items()
            if name in self.settings_cls.model_fields
        }


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        extra="ignore",
    )

    general: GeneralSettings = Field(default_factory=GeneralSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    timer: TimerSettings = Field(default_factory=TimerSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlFileSource(settings_cls, _file_layer.get()),
        )


def discover_config_file(explicit: Path | None = None) -> Path | None:
    """Return the config file to read, or None when there is none."""
    if explicit is not None:
        return explicit
    project_file = Path.cwd() / PROJECT_CONFIG_FILENAME
    if project_file.exists():
        return project_file
    if USER_CONFIG_PATH.exists():
        return USER_CONFIG_PATH
    return None


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML config file into a plain dict."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise ConfigFileError(f"Config file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigFileError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(f"Config file {path} must contain a mapping")
    return data


class ConfigService:
    """Loads and caches the effective Settings."""

    def __init__(self) -> None:
        self._settings: Settings | None = None
        self._source: Path | None = None

    @property
    def source(self) -> Path | None:
        """Config file the current settings were read from."""
        return self._source

    def load(
        self,
        config_file: Path | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> Settings:
        path = discover_config_file(config_file)
        file_data = read_config_file(path) if path else {}

        token = _file_layer.set(file_data)
        try:
            settings = Settings(**(overrides or {}))
        finally:
            _file_layer.reset(token)

        self._settings = settings
        self._source = path
        return settings

    def get(self) -> Settings:
        if self._settings is None:
            return self.load()
        return self._settings


config_service = ConfigService()


def get_settings() -> Settings:
    """Get the effective settings, loading them on first use."""
    return config_service.get()