"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# Cache settings
DEFAULT_CACHE_DIR = ".cache"
DEFAULT_CACHE_DISABLED = False

# Rendering
DEFAULT_DARK_MODE = False
DEFAULT_MINIFY = False
DEFAULT_MATH_FORMAT = "svg"
DEFAULT_FAIL_ON_ERROR = True

# Engines
DEFAULT_SYSTEM_FONTS = False
DEFAULT_TYPST_BINARY = "typst"
DEFAULT_PIKCHR_BINARY = "pikchr"
DEFAULT_PANDOC_BINARY = "pandoc"
DEFAULT_REGISTRY_URL = "https://packages.typst.org"

# Concurrency
DEFAULT_MAX_WORKERS = 4

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "cache_dir": DEFAULT_CACHE_DIR,
        "cache_disabled": DEFAULT_CACHE_DISABLED,
        "dark_mode": DEFAULT_DARK_MODE,
        "minify": DEFAULT_MINIFY,
        "math_format": DEFAULT_MATH_FORMAT,
        "fail_on_error": DEFAULT_FAIL_ON_ERROR,
        "light_styles": None,
        "dark_styles": None,
        "font_dirs": [],
        "system_fonts": DEFAULT_SYSTEM_FONTS,
        "typst_binary": DEFAULT_TYPST_BINARY,
        "pikchr_binary": DEFAULT_PIKCHR_BINARY,
        "pandoc_binary": DEFAULT_PANDOC_BINARY,
        "registry_url": DEFAULT_REGISTRY_URL,
        "max_workers": DEFAULT_MAX_WORKERS,
        "log_level": DEFAULT_LOG_LEVEL,
    }
