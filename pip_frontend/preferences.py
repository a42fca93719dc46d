"""User preferences for package operations.

Preferences are loaded from ``~/.pip-frontend/config.yaml`` and environment
variables. They are passed explicitly to every manager operation and are
never cached between operations.

Example config.yaml::

    show_output_window_for_installs: true
    elevate_tool_installs: false
    bootstrap_url: https://bootstrap.pypa.io/get-pip.py
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import yaml

CONFIG_HOME_DIR = ".pip-frontend"
CONFIG_FILE_NAME = "config.yaml"

ENV_SHOW_OUTPUT = "PIP_FRONTEND_SHOW_OUTPUT"
ENV_ELEVATE_PIP = "PIP_FRONTEND_ELEVATE_PIP"
ENV_BOOTSTRAP_URL = "PIP_FRONTEND_BOOTSTRAP_URL"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class Preferences:
    """Settings consulted by install, uninstall and pip bootstrap."""
    show_output_window_for_installs: bool = False
    elevate_tool_installs: bool = False
    bootstrap_url: Optional[str] = None


def default_config_path() -> Path:
    return Path.home() / CONFIG_HOME_DIR / CONFIG_FILE_NAME


def load_preferences(config_path: Optional[Union[str, Path]] = None) -> Preferences:
    """Load preferences from the config file, then apply env overrides.

    Args:
        config_path: YAML file to read. Defaults to ~/.pip-frontend/config.yaml.
            A missing file yields the defaults.

    Returns:
        Preferences instance.

    Raises:
        ValueError: If the file is not a YAML mapping or a value has the
            wrong type.
    """
    config_path = Path(config_path) if config_path else default_config_path()
    data: dict = {}

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ValueError(
                    f"Preferences must be a YAML mapping, got {type(loaded).__name__} "
                    f"({config_path})"
                )
            data = {
                k: v for k, v in loaded.items()
                if k in Preferences.__dataclass_fields__
            }

    for key in ("show_output_window_for_installs", "elevate_tool_installs"):
        if key in data and not isinstance(data[key], bool):
            raise ValueError(f"'{key}' must be true or false ({config_path})")
    if data.get("bootstrap_url") is not None and not isinstance(data["bootstrap_url"], str):
        raise ValueError(f"'bootstrap_url' must be a string ({config_path})")

    env_show = os.environ.get(ENV_SHOW_OUTPUT)
    if env_show is not None:
        data["show_output_window_for_installs"] = _parse_bool(env_show, ENV_SHOW_OUTPUT)

    env_elevate = os.environ.get(ENV_ELEVATE_PIP)
    if env_elevate is not None:
        data["elevate_tool_installs"] = _parse_bool(env_elevate, ENV_ELEVATE_PIP)

    env_url = os.environ.get(ENV_BOOTSTRAP_URL)
    if env_url:
        data["bootstrap_url"] = env_url.strip()

    return Preferences(**data)


def _parse_bool(value: str, name: str) -> bool:
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")
