"""Cache manager — owns the cache directory and its logical caches."""

from __future__ import annotations

import logging
from pathlib import Path

from typmark.cache.stats import CacheStats
from typmark.cache.store import ContentCache
from typmark.types import RenderedMath

logger = logging.getLogger(__name__)

MATH_CACHE_NAME = "math-svg"
MATHML_CACHE_NAME = "math-mathml"
DIAGRAM_CACHE_NAME = "diagram"

_DEFAULT_CACHE_DIR = Path(".cache")


class CacheManager:
    """One file per logical cache under ``cache_dir``, loaded eagerly.

    ``persist`` is meant to run once, at the end of a run. A disabled manager
    hands out no caches, so renderers compile every time.
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        enabled: bool = True,
    ) -> None:
        self._enabled = enabled
        self._cache_dir = Path(cache_dir) if cache_dir else _DEFAULT_CACHE_DIR
        self._math: ContentCache[RenderedMath] | None = None
        self._mathml: ContentCache[str] | None = None
        self._diagram: ContentCache[str] | None = None
        if enabled:
            self._math = ContentCache.load(
                self._file_for(MATH_CACHE_NAME), RenderedMath, name=MATH_CACHE_NAME
            )
            self._mathml = ContentCache.load(
                self._file_for(MATHML_CACHE_NAME), str, name=MATHML_CACHE_NAME
            )
            self._diagram = ContentCache.load(
                self._file_for(DIAGRAM_CACHE_NAME), str, name=DIAGRAM_CACHE_NAME
            )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    @property
    def math(self) -> ContentCache[RenderedMath] | None:
        return self._math

    @property
    def mathml(self) -> ContentCache[str] | None:
        return self._mathml

    @property
    def diagram(self) -> ContentCache[str] | None:
        return self._diagram

    def persist(self) -> None:
        """Write every logical cache to disk."""
        for cache in self._caches():
            cache.persist()

    def clear(self) -> None:
        """Drop all entries from memory and remove the cache files."""
        for cache in self._caches():
            cache.clear()
            if cache.path is not None:
                cache.path.unlink(missing_ok=True)
        logger.info("Cleared caches in %s", self._cache_dir)

    def stats(self) -> list[CacheStats]:
        """Per-cache statistics followed by the aggregate."""
        per_cache = [cache.stats() for cache in self._caches()]
        total = CacheStats(
            name="total",
            entries=sum(s.entries for s in per_cache),
            size_bytes=sum(s.size_bytes for s in per_cache),
            hits=sum(s.hits for s in per_cache),
            misses=sum(s.misses for s in per_cache),
        )
        return [*per_cache, total]

    def _caches(self) -> list[ContentCache]:
        return [c for c in (self._math, self._mathml, self._diagram) if c is not None]

    def _file_for(self, name: str) -> Path:
        return self._cache_dir / f"{name}.bin"
