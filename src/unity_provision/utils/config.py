"""Helpers for loading the user configuration file (~/.unity-provision/config.json)."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Final

CONFIG_DIR = Path.home() / ".unity-provision"
CONFIG_FILE = CONFIG_DIR / "config.json"

CATALOG_ENV_VAR: Final[str] = "UNITY_PROVISION_CATALOG"
CATALOG_CONFIG_KEY: Final[str] = "release_catalog"
ANDROID_CONFIG_DIR_KEY: Final[str] = "android_config_dir"


@lru_cache(maxsize=1)
def load_config() -> dict[str, Any]:
    """Load configuration data from disk (cached)."""

    if not CONFIG_FILE.exists():
        return {}

    try:
        raw = CONFIG_FILE.read_text()
    except OSError:
        return {}

    try:
        data = json.loads(raw)
    except ValueError:
        return {}

    if isinstance(data, dict):
        return data

    return {}


def get_config_value(key: str, default: Any | None = None) -> Any | None:
    """Fetch a configuration value by key."""

    return load_config().get(key, default)


def reload_config() -> None:
    """Force the cached configuration to be reloaded on next access."""

    load_config.cache_clear()


def _config_path(value: Any) -> Path | None:
    if isinstance(value, str) and value:
        return Path(value).expanduser()
    return None


def get_catalog_path() -> Path | None:
    """Resolve the release catalog file via env/config."""

    return _config_path(os.environ.get(CATALOG_ENV_VAR)) or _config_path(
        get_config_value(CATALOG_CONFIG_KEY)
    )


def get_android_config_dir() -> Path | None:
    """Get the configured override for ~/.android, if any."""

    return _config_path(get_config_value(ANDROID_CONFIG_DIR_KEY))
