"""Configuration loader for ReferrerCop.

This module locates and loads the YAML configuration file that names the
blacklist, whitelist, compiled-list cache directory, and update URLs.
"""

from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import yaml

from referrercop.core.constants import CONFIG_FILENAME, CONFIG_PATHS, DEFAULTS
from referrercop.core.exceptions import ConfigError
from referrercop.core.models import Settings


# ============================================================================
# Configuration Paths
# ============================================================================

def find_config_file(search_paths: Optional[list[str]] = None) -> Optional[Path]:
    """Find the first existing config file along the search path.

    Args:
        search_paths: Directories to search. Defaults to CONFIG_PATHS

    Returns:
        Path to the config file, or None if no directory contains one
    """
    for directory in search_paths if search_paths is not None else CONFIG_PATHS:
        candidate = Path(directory).expanduser() / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


# ============================================================================
# Settings Loader
# ============================================================================

def load_settings(
    config_file: Path | str | None = None,
    *,
    search_paths: Optional[list[str]] = None,
) -> Settings:
    """Load settings from YAML, falling back to defaults.

    Args:
        config_file: Explicit config file. If None, the search path is used
        search_paths: Directories to search when config_file is None

    Returns:
        Settings with every key resolved

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid
    """
    if config_file is not None:
        config_path: Optional[Path] = Path(config_file)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
    else:
        config_path = find_config_file(search_paths)

    data: dict[str, Any] = {}
    if config_path is not None:
        data = _read_config(config_path)

    unknown = sorted(set(data) - set(DEFAULTS))
    if unknown:
        raise ConfigError(
            f"Configuration error in {config_path}: unknown keys: {', '.join(unknown)}"
        )

    values = {**DEFAULTS, **data}

    for key in ("blacklist_file", "whitelist_file", "update_url", "update_sha1_url"):
        if not isinstance(values[key], str) or not values[key]:
            raise ConfigError(
                f"Configuration error in {config_path}: '{key}' must be a non-empty string"
            )

    cache_path = values["cache_path"]
    if cache_path is not None and not isinstance(cache_path, str):
        raise ConfigError(
            f"Configuration error in {config_path}: 'cache_path' must be a path or null"
        )

    return Settings(
        blacklist_file=Path(values["blacklist_file"]).expanduser(),
        whitelist_file=Path(values["whitelist_file"]).expanduser(),
        cache_path=Path(cache_path).expanduser() if cache_path else None,
        update_url=values["update_url"],
        update_sha1_url=values["update_sha1_url"],
        config_file=config_path,
    )


def _read_config(config_path: Path) -> dict[str, Any]:
    """Parse a config file into a mapping.

    Raises:
        ConfigError: If the file cannot be read or is not a YAML mapping
    """
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config YAML {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file {config_path}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration error in {config_path}: expected a mapping")

    return data


def apply_overrides(
    settings: Settings,
    *,
    blacklist_file: Optional[Path] = None,
    whitelist_file: Optional[Path] = None,
) -> Settings:
    """Return settings with command-line list paths applied."""
    changes: dict[str, Path] = {}
    if blacklist_file is not None:
        changes["blacklist_file"] = blacklist_file
    if whitelist_file is not None:
        changes["whitelist_file"] = whitelist_file
    return replace(settings, **changes) if changes else settings
