"""Math rendering to MathML markup, memoized by content."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from typmark.cache.keys import math_key
from typmark.errors.exceptions import UsageError
from typmark.types import RenderMode

if TYPE_CHECKING:
    from typmark.cache.store import ContentCache
    from typmark.engine.base import MathMLEngine

logger = logging.getLogger(__name__)


class MathMLRenderer:
    """Display and Inline math only; Raw typst has no MathML form.

    The cache key covers the delimited equation, the mode and the minify
    flag.
    """

    def __init__(
        self,
        engine: MathMLEngine,
        cache: ContentCache[str] | None = None,
        minify: bool = False,
    ) -> None:
        self._engine = engine
        self._cache = cache
        self._minify = minify

    @property
    def cache(self) -> ContentCache[str] | None:
        return self._cache

    def render(self, source: str, mode: RenderMode) -> str:
        equation = delimit(source, mode)
        key = math_key(equation, mode, self._minify)

        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for MathML %s", key)
                return cached

        rendered = self._engine.convert(equation)
        if self._cache is not None:
            self._cache.insert(key, rendered)
        return rendered


def delimit(source: str, mode: RenderMode) -> str:
    """Wrap ``source`` as a typst equation: spaced delimiters make it a block."""
    if mode == RenderMode.DISPLAY:
        return f"$ {source} $"
    if mode == RenderMode.INLINE:
        return f"${source}$"
    raise UsageError("Raw mode is not supported for MathML")
