"""Configuration hierarchy — merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.typmark/config.yaml)
  3. Project config   (./typmark.yaml, searched upward)
  4. Environment variables (TYPMARK_*)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from typmark.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".typmark" / "config.yaml"
_PROJECT_CONFIG_NAME = "typmark.yaml"

# Map of environment variables to config keys
_ENV_MAP: dict[str, str] = {
    "TYPMARK_CACHE_DIR": "cache_dir",
    "TYPMARK_CACHE_DISABLED": "cache_disabled",
    "TYPMARK_DARK_MODE": "dark_mode",
    "TYPMARK_MINIFY": "minify",
    "TYPMARK_MATH_FORMAT": "math_format",
    "TYPMARK_FAIL_ON_ERROR": "fail_on_error",
    "TYPMARK_LIGHT_STYLES": "light_styles",
    "TYPMARK_DARK_STYLES": "dark_styles",
    "TYPMARK_FONT_DIRS": "font_dirs",
    "TYPMARK_SYSTEM_FONTS": "system_fonts",
    "TYPMARK_TYPST_BINARY": "typst_binary",
    "TYPMARK_PIKCHR_BINARY": "pikchr_binary",
    "TYPMARK_PANDOC_BINARY": "pandoc_binary",
    "TYPMARK_REGISTRY_URL": "registry_url",
    "TYPMARK_MAX_WORKERS": "max_workers",
    "TYPMARK_LOG_LEVEL": "log_level",
}

# Keys that should be parsed as specific types
_TYPE_MAP: dict[str, type] = {
    "max_workers": int,
}

_BOOL_KEYS = {"cache_disabled", "dark_mode", "minify", "fail_on_error", "system_fonts"}
_LIST_KEYS = {"font_dirs"}

# Boolean env var values
_TRUTHY = {"1", "true", "yes", "on"}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a merged dict with the final resolved values.
    """
    config = get_defaults()

    # Layer 2: Global config
    global_cfg = _load_yaml_config(_GLOBAL_CONFIG_PATH)
    if global_cfg:
        config.update(global_cfg)

    # Layer 3: Project config (search from cwd upward)
    project_path = _find_project_config()
    if project_path:
        project_cfg = _load_yaml_config(project_path)
        if project_cfg:
            config.update(project_cfg)

    # Layer 4: Environment variables
    config.update(_load_env_vars())

    # Layer 5: Runtime arguments (highest priority)
    # None means "not set"
    for key, value in runtime_overrides.items():
        if value is not None:
            config[key] = value

    return config


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Load a YAML config file if it exists."""
    if not path.exists() or not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if isinstance(data, dict):
            return data
        logger.warning("Config file %s is not a mapping, ignoring", path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
    return None


def _find_project_config() -> Path | None:
    """Search for typmark.yaml from cwd upward."""
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.exists():
            return candidate
    return None


def _load_env_vars() -> dict[str, Any]:
    """Read TYPMARK_* environment variables."""
    result: dict[str, Any] = {}
    for env_key, config_key in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        result[config_key] = _coerce_env_value(config_key, value)
    return result


def _coerce_env_value(key: str, value: str) -> Any:
    """Coerce an environment variable string to the appropriate type."""
    if key in _BOOL_KEYS:
        return value.lower() in _TRUTHY

    if key in _LIST_KEYS:
        return [part for part in value.split(os.pathsep) if part]

    target_type = _TYPE_MAP.get(key)
    if target_type:
        try:
            return target_type(value)
        except (ValueError, TypeError):
            logger.warning(
                "Cannot convert env var for '%s' to %s: %s", key, target_type.__name__, value
            )
            return value

    return value
