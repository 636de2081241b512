"""
Configuration module for Worklog.

Layered configuration loading (CLI > env > config file > defaults) with
pydantic-based validation.
"""

from worklog.config.defaults import (
    DEFAULT_STATE_FILE,
    ENV_PREFIX,
    PROJECT_CONFIG_FILENAME,
    USER_CONFIG_PATH,
)
from worklog.config.settings import (
    ApiSettings,
    ConfigFileError,
    ConfigService,
    GeneralSettings,
    Settings,
    TimerSettings,
    config_service,
    get_settings,
)

__all__ = [
    # Defaults
    "DEFAULT_STATE_FILE",
    "ENV_PREFIX",
    "PROJECT_CONFIG_FILENAME",
    "USER_CONFIG_PATH",
    # Settings
    "Settings",
    "GeneralSettings",
    "ApiSettings",
    "TimerSettings",
    "ConfigService",
    "ConfigFileError",
    "config_service",
    "get_settings",
]
