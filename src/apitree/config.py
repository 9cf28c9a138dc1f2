"""Configuration management with XDG paths and precedence resolution.

This module handles persistent configuration for apitree:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.apitree/`` on macOS and Windows. See :func:`get_config_dir`.
* **Global config** -- A single :class:`~apitree.models.GlobalConfig`
  JSON file storing the default directory URL, private-API toggle, debug
  flag, and transport settings.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and the global config file into the final
  effective configuration.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Optional

from apitree.exceptions import ConfigError
from apitree.models import GlobalConfig

_APP_NAME = "apitree"
_CONFIG_FILENAME = "config.json"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory.

    On Linux/BSD: ``$XDG_CONFIG_HOME/apitree/`` (default ``~/.config/apitree/``).
    On macOS/Windows: ``~/.apitree/``.

    The directory is not created; apitree only ever reads from it.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        return base / _APP_NAME
    return Path.home() / f".{_APP_NAME}"


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~apitree.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def _env_flag(name: str) -> Optional[bool]:
    """Read a boolean environment variable, ``None`` when unset or empty."""
    value = os.environ.get(name, "").strip().lower()
    if not value:
        return None
    return value in _TRUTHY


# --- Precedence resolution ---


def resolve_config(
    cli_directory_url: Optional[str] = None,
    cli_include_private: Optional[bool] = None,
    cli_debug: Optional[bool] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``APITREE_DIRECTORY_URL``,
           ``APITREE_INCLUDE_PRIVATE``, ``APITREE_DEBUG``)
        3. User config (``~/.config/apitree/config.json``)
        4. Defaults

    Returns:
        The effective :class:`~apitree.models.GlobalConfig`.
    """
    config = load_global_config()

    env_url = os.environ.get("APITREE_DIRECTORY_URL")
    if env_url:
        config.directory_url = env_url
    env_private = _env_flag("APITREE_INCLUDE_PRIVATE")
    if env_private is not None:
        config.include_private = env_private
    env_debug = _env_flag("APITREE_DEBUG")
    if env_debug is not None:
        config.debug = env_debug

    if cli_directory_url is not None:
        config.directory_url = cli_directory_url
    if cli_include_private is not None:
        config.include_private = cli_include_private
    if cli_debug is not None:
        config.debug = cli_debug

    return config
