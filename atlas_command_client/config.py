"""Configuration loader for atlas-command-client."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(slots=True)
class ClientConfig:
    base_url: str = constants.DEFAULT_BASE_URL
    token: Optional[str] = None
    timeout_seconds: float = constants.DEFAULT_TIMEOUT_SECONDS


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class AtlasConfig:
    atlas: ClientConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_config(path: Optional[Path] = None) -> AtlasConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "atlas": {
                "base_url": constants.DEFAULT_BASE_URL,
                "token": "",
                "timeout_seconds": str(constants.DEFAULT_TIMEOUT_SECONDS),
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "log_network": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    try:
        timeout_value = parser.getfloat(
            "atlas", "timeout_seconds", fallback=constants.DEFAULT_TIMEOUT_SECONDS
        )
    except ValueError:
        timeout_value = constants.DEFAULT_TIMEOUT_SECONDS
    if timeout_value <= 0:
        timeout_value = constants.DEFAULT_TIMEOUT_SECONDS

    atlas = ClientConfig(
        base_url=parser.get("atlas", "base_url").strip() or constants.DEFAULT_BASE_URL,
        token=_optional(parser.get("atlas", "token", fallback=None)),
        timeout_seconds=timeout_value,
    )

    log_path_value = _optional(parser.get("logging", "path", fallback=None))
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    return AtlasConfig(
        atlas=atlas,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )


def save_config(config: AtlasConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
