"""Configuration management for itaulink-uy."""

import json
import os
from pathlib import Path
from typing import Any

from itaulink_uy.credentials import Credentials
from itaulink_uy.session import BASE_URL, DEFAULT_TIMEOUT

# Default config filename
CONFIG_FILENAME = "config.json"
APP_DIR_NAME = "itaulink-uy"

ID_ENV_VAR = "ITAU_ID"
PASSWORD_ENV_VAR = "ITAU_PASSWORD"


def get_config_dir() -> Path:
    """Get the config directory path (XDG compliant)."""
    xdg_config_home = os.getenv("XDG_CONFIG_HOME", str(Path.home() / ".config"))
    return Path(xdg_config_home) / APP_DIR_NAME


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_config_dir() / CONFIG_FILENAME


def find_config_file() -> Path | None:
    """Find the config file in standard locations.

    Searches for config in the following order:
    1. config.json in current directory
    2. XDG config: ~/.config/itaulink-uy/config.json
    """
    config_paths = [
        Path(CONFIG_FILENAME),
        get_config_path(),
    ]

    for path in config_paths:
        if path.exists():
            return path

    return None


def load_json_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(config_path, encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


def save_json_config(config: dict[str, Any], config_path: Path | None = None) -> Path:
    """Save configuration to a JSON file.

    The file holds the encoded password, so it is created readable by the
    owner only.

    Args:
        config: Configuration dictionary to save
        config_path: Path to save to (defaults to XDG config location)

    Returns:
        Path where config was saved
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
        f.write("\n")
    config_path.chmod(0o600)

    return config_path


def load_config(config_path: Path | None = None) -> dict[str, Any] | None:
    """Load configuration from config file.

    Args:
        config_path: Explicit path to config.json file

    Returns:
        Loaded config dict or None if not found
    """
    if config_path:
        return load_json_config(config_path)

    config_file = find_config_file()
    if config_file:
        return load_json_config(config_file)

    return None


def config_exists() -> bool:
    """Check if any config file exists."""
    return find_config_file() is not None


def _itau_section(config: dict[str, Any] | None) -> dict[str, Any]:
    if not config:
        return {}
    return config.get("itau") or {}


def get_credentials(
    config: dict[str, Any] | None = None,
    id_override: str | None = None,
    password_override: str | None = None,
) -> Credentials | None:
    """Get portal credentials.

    Each value is taken from the override, then the ITAU_ID / ITAU_PASSWORD
    environment variables, then the config file. The password is expected
    base64 encoded everywhere.

    Args:
        config: Loaded JSON config
        id_override: Document number from the command line
        password_override: Encoded password from the command line

    Returns:
        Credentials or None if the id or the password is missing
    """
    section = _itau_section(config)

    user_id = id_override or os.getenv(ID_ENV_VAR) or section.get("id")
    password = password_override or os.getenv(PASSWORD_ENV_VAR) or section.get("password")

    if not user_id or not password:
        return None
    return Credentials(id=str(user_id), encoded_password=str(password))


def get_base_url(config: dict[str, Any] | None = None) -> str:
    """Get the portal base URL."""
    return _itau_section(config).get("base_url") or BASE_URL  # type: ignore[no-any-return]


def get_timeout(config: dict[str, Any] | None = None) -> float:
    """Get the request timeout in seconds."""
    timeout = _itau_section(config).get("timeout")
    return float(timeout) if timeout else DEFAULT_TIMEOUT


def get_logging_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Get logging level and optional log file.

    Returns:
        Dictionary with "level" and "file" keys
    """
    logging_config = (config or {}).get("logging") or {}
    return {
        "level": logging_config.get("level") or "WARNING",
        "file": logging_config.get("file"),
    }


def create_default_config() -> dict[str, Any]:
    """Create a default empty configuration."""
    return {
        "itau": {
            "id": None,
            "password": None,
            "base_url": BASE_URL,
            "timeout": DEFAULT_TIMEOUT,
        },
        "logging": {
            "level": "WARNING",
            "file": None,
        },
    }
