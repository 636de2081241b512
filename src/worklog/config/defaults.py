"""Default configuration values and well-known paths."""

from __future__ import annotations

from pathlib import Path

ENV_PREFIX = "WORKLOG_"

USER_CONFIG_DIR = Path.home() / ".worklog"
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_FILENAME = "worklog.yaml"

# Where the timer snapshot survives restarts.
DEFAULT_STATE_FILE = USER_CONFIG_DIR / "timer-storage.json"

DEFAULT_API_BASE_URL = "http://localhost:5000/api/v1"
DEFAULT_API_TIMEOUT = 10.0

DEFAULT_TICK_INTERVAL = 1.0
DEFAULT_RECONCILE_INTERVAL = 60.0
