"""Constants used across the atlas-command-client package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "atlas-command"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".atlas" / DEFAULT_CONFIG_FILENAME

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT_SECONDS = 30.0

DEFAULT_TASK_STATUS = "pending"
DEFAULT_CHECKIN_STATUS_FILTER = "pending,acknowledged"
