"""Math and raw typst rendering: template, cache check, compile, first page."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from typmark.cache.keys import math_key
from typmark.engine.base import format_diagnostics
from typmark.errors.exceptions import (
    CompileDiagnosticError,
    CompileWarningError,
    NoPagesError,
    UsageError,
)
from typmark.render.templates import ALIGN_LABEL, build_document
from typmark.render.themer import minify_svg
from typmark.types import RenderedMath, RenderMode, RenderRequest

if TYPE_CHECKING:
    from typmark.cache.store import ContentCache
    from typmark.engine.base import TypesetEngine
    from typmark.world.compiler_world import CompilerWorld

logger = logging.getLogger(__name__)


class MathRenderer:
    """Compile math spans and typst blocks to SVG, memoized by content.

    On a miss the compile runs outside any lock, so two threads missing the
    same key may both compile; each gets a correct result and the cache keeps
    whichever was inserted last.
    """

    def __init__(
        self,
        world: CompilerWorld,
        engine: TypesetEngine,
        cache: ContentCache[RenderedMath] | None = None,
        minify: bool = False,
    ) -> None:
        self._world = world
        self._engine = engine
        self._cache = cache
        self._minify = minify

    @property
    def cache(self) -> ContentCache[RenderedMath] | None:
        return self._cache

    def render(self, request: RenderRequest) -> RenderedMath:
        """Dispatch a request on its mode."""
        if request.mode == RenderMode.RAW:
            return self.render_raw(request.source, request.extra_styles)
        return self.render_math(request.source, request.mode, request.extra_styles)

    def render_math(
        self,
        source: str,
        mode: RenderMode,
        extra_styles: str | None = None,
    ) -> RenderedMath:
        """Render a math expression in Display or Inline mode."""
        if mode == RenderMode.RAW:
            raise UsageError("Raw mode is not a math mode; use render_raw()")
        return self._render(source, mode, extra_styles)

    def render_raw(self, source: str, extra_styles: str | None = None) -> RenderedMath:
        """Render arbitrary typst markup. The result has no alignment."""
        return self._render(source, RenderMode.RAW, extra_styles)

    def _render(self, source: str, mode: RenderMode, extra_styles: str | None) -> RenderedMath:
        document = build_document(source, mode, extra_styles)
        key = math_key(document, mode, self._minify)

        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for %s render %s", mode.value, key)
                return cached

        result = self._compile(document, mode)
        if self._cache is not None:
            self._cache.insert(key, result)
        return result

    def _compile(self, document: str, mode: RenderMode) -> RenderedMath:
        session = self._world.session(document)
        query = ALIGN_LABEL if mode == RenderMode.INLINE else None
        output = self._engine.compile(session, query_label=query)

        if output.warnings:
            raise CompileWarningError(
                format_diagnostics(output.warnings), diagnostics=output.warnings
            )
        if output.errors:
            raise CompileDiagnosticError(
                format_diagnostics(output.errors), diagnostics=output.errors
            )
        if not output.pages:
            raise NoPagesError("no pages")
        if len(output.pages) > 1:
            logger.debug("Render produced %d pages, keeping the first", len(output.pages))

        image = output.pages[0]
        if self._minify:
            image = minify_svg(image)

        if mode == RenderMode.RAW:
            align = None
        elif mode == RenderMode.INLINE and output.label_value is not None:
            align = output.label_value
        else:
            align = 0.0
        return RenderedMath(content=image, align=align)
