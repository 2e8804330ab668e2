"""Local configuration: the stored device token and parent directory.

The config is an explicit value. Operations that change it return a new
Config which the caller saves.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from .remarkable.models import Directory

logger = logging.getLogger(__name__)

# Default config locations
DEFAULT_CONFIG_NAME = ".ctc-import"
XDG_CONFIG_NAME = "ctc-import/config.yaml"
CONFIG_ENV_VAR = "CTC_IMPORT_CONFIG"

# File permissions (owner read/write only)
CONFIG_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600


class ConfigError(Exception):
    """Raised when configuration loading/saving fails."""

    pass


class Config(BaseModel):
    """Persisted settings."""

    device_token: str | None = Field(default=None, alias="deviceToken")
    parent: Directory | None = None

    model_config = {"populate_by_name": True}


def default_config_path() -> Path:
    """Determine the default configuration file path.

    Checks in order:
    1. CTC_IMPORT_CONFIG environment variable
    2. ~/.ctc-import (home directory)
    3. ~/.config/ctc-import/config.yaml (XDG config)

    Returns:
        Path to the configuration file.
    """
    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        return Path(env_config).expanduser()

    home_config = Path.home() / DEFAULT_CONFIG_NAME
    if home_config.exists():
        return home_config

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        xdg_config = Path(xdg_config_home) / XDG_CONFIG_NAME
    else:
        xdg_config = Path.home() / ".config" / XDG_CONFIG_NAME

    if xdg_config.exists():
        return xdg_config

    # Default to home directory location
    return home_config


def read_config(path: Path) -> Config:
    """Read the config file strictly.

    Raises:
        ConfigError: If the file is unreadable or invalid.
    """
    try:
        data = yaml.safe_load(path.read_text())
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to parse config file: {e}") from e

    if not data:
        return Config()

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}") from e


def load_config(path: Path) -> Config:
    """Load the config, treating a missing or broken file as empty."""
    if not path.exists():
        return Config()

    try:
        return read_config(path)
    except ConfigError as e:
        logger.warning("Ignoring config at %s: %s", path, e)
        return Config()


def save_config(config: Config, path: Path) -> None:
    """Save the config with owner-only permissions.

    Raises:
        ConfigError: If the config cannot be written.
    """
    data = config.model_dump(by_alias=True, exclude_none=True)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(data, default_flow_style=False))
        path.chmod(CONFIG_FILE_MODE)
    except OSError as e:
        raise ConfigError(f"Failed to save config: {e}") from e
