"""Settings for py_colstore, read from colstore.toml.

colstore.toml is looked up from the start directory (default: cwd) upward
to the filesystem root:

    [colstore]
    data_path = "./data"     # relative to the directory holding colstore.toml

COLSTORE_DATA_PATH overrides data_path. With no file the defaults apply.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, ValidationError

from .errors import ConfigError

CONFIG_FILENAME = "colstore.toml"
ENV_DATA_PATH = "COLSTORE_DATA_PATH"

logger = logging.getLogger(__name__)

_cached: StoreSettings | None = None


class StoreSettings(BaseModel):
    data_path: str = "./data"
    config_file: str | None = None  # where the settings came from, if anywhere


def find_config_file(start: Path | str | None = None) -> Path | None:
    current = Path(start or os.getcwd()).resolve()
    for d in [current, *current.parents]:
        candidate = d / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def _parse_config_file(path: Path) -> StoreSettings:
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to parse configuration file at '{path}': {e}") from e

    section = raw.get("colstore", {})
    if not isinstance(section, dict):
        raise ConfigError(f"[colstore] in '{path}' must be a table")
    try:
        settings = StoreSettings(**{**section, "config_file": str(path)})
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in '{path}': {e}") from e

    data_path = Path(settings.data_path)
    if not data_path.is_absolute():
        settings.data_path = str((path.parent / data_path).resolve())
    return settings


def load_settings(*, reload: bool = False, search_from: Path | str | None = None) -> StoreSettings:
    """Load settings, cached after the first call unless ``reload`` is set."""
    global _cached
    if _cached is not None and not reload:
        return _cached

    path = find_config_file(search_from)
    if path is None:
        logger.debug("no %s found; using defaults", CONFIG_FILENAME)
        settings = StoreSettings()
    else:
        settings = _parse_config_file(path)

    env_path = os.environ.get(ENV_DATA_PATH)
    if env_path:
        settings.data_path = env_path

    _cached = settings
    return settings


def clear_settings_cache() -> None:
    global _cached
    _cached = None
