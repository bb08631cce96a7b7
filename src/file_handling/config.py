"""Configuration for selecting and building a file manager.

Settings come from a YAML file (``.file-handling.yaml`` in the working
directory, or the path in ``FILE_HANDLING_CONFIG``) and are overlaid with
environment variables:

- ``FILE_HANDLING_PROVIDER``: disk | memory | azure
- ``FILE_HANDLING_ROOT``: root folder of the disk provider
- ``AZURE_STORAGE_CONNECTION_STRING``: connection string of the azure provider
"""

import os
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from .constants import CONFIG_ENV_VAR, CONFIG_FILE, DEFAULT_LINK_VALIDITY_MINUTES
from .errors import ConfigError

_ENV_OVERRIDES = {
    "FILE_HANDLING_PROVIDER": "provider",
    "FILE_HANDLING_ROOT": "root_folder",
    "AZURE_STORAGE_CONNECTION_STRING": "connection_string",
}


class FileHandlingSettings(BaseModel):
    """Which backend to use and how to reach it."""
    provider: Literal["disk", "memory", "azure"] = "disk"
    root_folder: str = ""          # disk provider
    connection_string: str = ""    # azure provider
    link_validity_minutes: int = Field(DEFAULT_LINK_VALIDITY_MINUTES, gt=0)


def _config_path(path: Optional[Union[str, Path]]) -> Path:
    if path is not None:
        return Path(path)
    if os.environ.get(CONFIG_ENV_VAR):
        return Path(os.environ[CONFIG_ENV_VAR])
    return Path.cwd() / CONFIG_FILE


def load_settings(path: Optional[Union[str, Path]] = None) -> FileHandlingSettings:
    """
    Load settings from YAML and the environment.

    A missing default config file is not an error; an explicitly given
    path must exist.

    Args:
        path: Optional config file path

    Returns:
        Validated settings

    Raises:
        ConfigError: If the file is missing, not valid YAML, or has invalid values
    """
    cfg_path = _config_path(path)
    data = {}
    if cfg_path.exists():
        try:
            data = yaml.safe_load(cfg_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {cfg_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in {cfg_path}")
        data = data.get("file_handling", data)
    elif path is not None:
        raise ConfigError(f"Config file not found: {cfg_path}")

    for env_var, field_name in _ENV_OVERRIDES.items():
        if os.environ.get(env_var):
            data[field_name] = os.environ[env_var]

    try:
        return FileHandlingSettings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid file handling configuration: {e}") from e
