import os
from pathlib import Path
from typing import Dict, Optional

from .domain.errors import ConfigError

CONFIG_DIR = Path.home() / ".profilesync"
CONFIG_FILE = CONFIG_DIR / "config"
IDENTITY_CACHE_FILE = CONFIG_DIR / "identity.json"

PROJECT_ID_KEY = "PROFILESYNC_PROJECT_ID"
DATABASE_KEY = "PROFILESYNC_DATABASE"
ID_TOKEN_KEY = "PROFILESYNC_ID_TOKEN"
TIMEOUT_KEY = "PROFILESYNC_TIMEOUT"

KNOWN_KEYS = (PROJECT_ID_KEY, DATABASE_KEY, ID_TOKEN_KEY, TIMEOUT_KEY)

DEFAULT_DATABASE = "(default)"
DEFAULT_TIMEOUT = 10.0


def read_config(config_file: Optional[Path] = None) -> Dict[str, str]:
    """read KEY=value lines from the config file."""
    config_file = config_file or CONFIG_FILE
    config = {}
    if not config_file.exists():
        return config

    try:
        with open(config_file, "r") as f:
            for line in f:
                line = line.strip()
                if "=" in line and not line.startswith("#"):
                    key, value = line.split("=", 1)
                    config[key.strip()] = value.strip()
    except (IOError, PermissionError, OSError):
        # if we can't read the file, treat as not configured
        return {}
    return config


def get_config_value(key: str, config_file: Optional[Path] = None) -> Optional[str]:
    """get a config value. environment variables win over the config file."""
    value = os.environ.get(key)
    if value:
        return value
    return read_config(config_file).get(key) or None


def set_config_value(key: str, value: str, config_file: Optional[Path] = None):
    """set a value in the config file, preserving other config values."""
    if key not in KNOWN_KEYS:
        raise ConfigError(f"Unknown config key '{key}'. Known keys: {', '.join(KNOWN_KEYS)}")

    config_file = config_file or CONFIG_FILE
    config_file.parent.mkdir(parents=True, exist_ok=True)

    config = read_config(config_file)
    config[key] = value

    try:
        with open(config_file, "w") as f:
            for k, v in config.items():
                f.write(f"{k}={v}\n")
    except (IOError, PermissionError, OSError) as e:
        raise ConfigError(f"failed to write config file: {e}") from e


def get_project_id(config_file: Optional[Path] = None) -> str:
    """
    get the Firestore project id.

    raises:
        ConfigError: if no project id is configured
    """
    project_id = get_config_value(PROJECT_ID_KEY, config_file)
    if not project_id:
        raise ConfigError(
            "No Firestore project configured. Set one with:\n"
            f"  profilesync config set {PROJECT_ID_KEY} <project-id>"
        )
    return project_id


def get_timeout(config_file: Optional[Path] = None) -> float:
    raw = get_config_value(TIMEOUT_KEY, config_file)
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigError(f"{TIMEOUT_KEY} must be a number of seconds, got '{raw}'")
    if timeout <= 0:
        raise ConfigError(f"{TIMEOUT_KEY} must be positive, got '{raw}'")
    return timeout
