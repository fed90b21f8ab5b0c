"""Cache subsystem — content-addressed render results persisted per run."""

from typmark.cache.keys import diagram_key, math_key
from typmark.cache.manager import CacheManager
from typmark.cache.stats import CacheStats
from typmark.cache.store import ContentCache

__all__ = [
    "CacheManager",
    "CacheStats",
    "ContentCache",
    "diagram_key",
    "math_key",
]
