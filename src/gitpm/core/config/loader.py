"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import PmConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILE = ".pm.json"

# Loaded configs keyed by resolved project directory
_config_cache: dict[Path, PmConfig] = {}


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """Get path to ~/.config/gitpm/config.json (or XDG equivalent)."""
    return get_xdg_config_home() / "gitpm" / "config.json"


def get_project_config_path(project_dir: Path) -> Path:
    """Get path to the .pm.json file in the project root."""
    return project_dir / PROJECT_CONFIG_FILE


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            logger.warning(f"Ignoring config at {path}: top level must be an object")
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to parse config at {path}: {e}")
        return None


def _parse_bool(value: str) -> bool:
    return value.strip().lower() not in ("false", "0", "no", "off", "")


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        PM_ID_WIDTH - overrides id_width
        PM_SLUG_MAX_LENGTH - overrides slug_max_length
        PM_EDITOR - overrides editor
        PM_SHOW_ARCHIVED - overrides show_archived

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    for env_var, key in (
        ("PM_ID_WIDTH", "id_width"),
        ("PM_SLUG_MAX_LENGTH", "slug_max_length"),
    ):
        if value := os.environ.get(env_var):
            try:
                result[key] = int(value)
            except ValueError:
                logger.warning(f"Invalid {env_var} value '{value}', ignoring")

    if editor := os.environ.get("PM_EDITOR"):
        result["editor"] = editor

    if show_archived := os.environ.get("PM_SHOW_ARCHIVED"):
        result["show_archived"] = _parse_bool(show_archived)

    return result


def get_default_config() -> dict[str, Any]:
    """Get hardcoded default configuration."""
    return {
        "id_width": 3,
        "slug_max_length": 50,
        "editor": None,
        "show_archived": False,
    }


def load_config(project_dir: Path, use_cache: bool = True) -> PmConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (PM_*)
        2. Project config (.pm.json)
        3. User config (~/.config/gitpm/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project root holding .pm.json
        use_cache: If True, return the config cached for this project directory

    Returns:
        Validated PmConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    key = project_dir.resolve()
    if use_cache and key in _config_cache:
        return _config_cache[key]

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged.update(user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged.update(project_config)

    merged = apply_env_overrides(merged)

    config = PmConfig(**merged)
    _config_cache[key] = config
    return config


def clear_cache() -> None:
    """
    Clear the cached configuration for every project.

    Useful for testing or when config files change during execution.
    """
    _config_cache.clear()
