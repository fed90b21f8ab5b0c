"""Pikchr diagrams: cached per theme, wrapped as data-URI images."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from typmark.cache.keys import diagram_key
from typmark.render.themer import data_uri
from typmark.types import Theme

if TYPE_CHECKING:
    from typmark.cache.store import ContentCache
    from typmark.engine.base import DiagramEngine

logger = logging.getLogger(__name__)


class DiagramCompiler:
    """Block-level diagrams; no baseline alignment involved."""

    def __init__(self, engine: DiagramEngine, cache: ContentCache[str] | None = None) -> None:
        self._engine = engine
        self._cache = cache

    def render(self, source: str, dark_mode: bool = False) -> str:
        themes = [Theme.LIGHT, Theme.DARK] if dark_mode else [Theme.LIGHT]
        return "".join(
            f'<img src="{data_uri(self.render_svg(source, theme == Theme.DARK), charset=True)}"'
            f' alt="{theme.value} mode" class="pikchr-svg pikchr-{theme.value}">'
            for theme in themes
        )

    def render_svg(self, source: str, dark_mode: bool = False) -> str:
        """One themed SVG, from the cache when possible."""
        key = diagram_key(source, dark_mode)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for diagram %s", key)
                return cached

        svg = self._engine.render(source, dark_mode=dark_mode)
        if self._cache is not None:
            self._cache.insert(key, svg)
        return svg
