"""Top-level entry points: Typmark and render_document()."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from typmark.cache.manager import CacheManager
from typmark.concurrency.pool import RenderPool
from typmark.config.schema import RenderSettings
from typmark.engine.pandoc import PandocMathMLEngine
from typmark.engine.pikchr import PikchrCliEngine
from typmark.engine.typst_cli import TypstCliEngine
from typmark.markdown.document import DocumentRenderer
from typmark.render.diagram import DiagramCompiler
from typmark.render.mathml import MathMLRenderer
from typmark.render.pipeline import MathRenderer
from typmark.render.themer import format_svg
from typmark.types import MathFormat, RenderMode
from typmark.world.compiler_world import CompilerWorld
from typmark.world.files import PackageSpec
from typmark.world.fonts import FontCatalog
from typmark.world.packages import PackageStore

if TYPE_CHECKING:
    import httpx

    from typmark.engine.base import DiagramEngine, MathMLEngine, TypesetEngine

logger = logging.getLogger(__name__)


class Typmark:
    """Renderer with full lifecycle control.

    Construct once per process; ``close()`` persists the caches.
    """

    def __init__(
        self,
        settings: RenderSettings | None = None,
        typeset_engine: TypesetEngine | None = None,
        diagram_engine: DiagramEngine | None = None,
        http_client: httpx.Client | None = None,
        mathml_engine: MathMLEngine | None = None,
    ) -> None:
        self._settings = settings or RenderSettings.resolve()
        s = self._settings

        self._cache_manager = CacheManager(cache_dir=s.cache_dir, enabled=not s.cache_disabled)
        self._packages = PackageStore(s.package_dir, registry_url=s.registry_url, client=http_client)
        self._world = CompilerWorld(self._packages, fonts=FontCatalog.from_directories(s.font_dirs))

        self._math = MathRenderer(
            self._world,
            typeset_engine or TypstCliEngine(s.typst_binary, system_fonts=s.system_fonts),
            cache=self._cache_manager.math,
            minify=s.minify,
        )
        self._mathml = MathMLRenderer(
            mathml_engine or PandocMathMLEngine(s.pandoc_binary),
            cache=self._cache_manager.mathml,
            minify=s.minify,
        )
        self._diagrams = DiagramCompiler(
            diagram_engine or PikchrCliEngine(s.pikchr_binary),
            cache=self._cache_manager.diagram,
        )

        self._light_styles, self._dark_styles = s.read_styles()
        self._documents = DocumentRenderer(
            self._math,
            self._diagrams,
            pool=RenderPool(max_workers=s.max_workers),
            light_styles=self._light_styles,
            dark_styles=self._dark_styles,
            dark_mode=s.dark_mode,
            fail_on_error=s.fail_on_error,
            mathml=self._mathml if s.math_format == MathFormat.MATHML else None,
        )

    @property
    def settings(self) -> RenderSettings:
        return self._settings

    @property
    def cache_manager(self) -> CacheManager:
        return self._cache_manager

    @property
    def world(self) -> CompilerWorld:
        return self._world

    @property
    def math_renderer(self) -> MathRenderer:
        return self._math

    @property
    def mathml_renderer(self) -> MathMLRenderer:
        return self._mathml

    @property
    def diagram_compiler(self) -> DiagramCompiler:
        return self._diagrams

    def render_math(
        self,
        source: str,
        mode: RenderMode = RenderMode.INLINE,
        extra_styles: str | None = None,
    ) -> str:
        """Render one math span to ``<img>`` markup."""
        rendered = self._math.render_math(source, mode, extra_styles)
        return self._format(rendered.content, rendered.align, mode)

    def render_mathml(self, source: str, mode: RenderMode = RenderMode.INLINE) -> str:
        """Render one math span to ``<math>`` markup."""
        return self._mathml.render(source, mode)

    def render_typst(self, source: str, extra_styles: str | None = None) -> str:
        """Render a raw typst block to ``<img>`` markup."""
        rendered = self._math.render_raw(source, extra_styles)
        return self._format(rendered.content, rendered.align, RenderMode.RAW)

    def render_diagram(self, source: str) -> str:
        return self._diagrams.render(source, dark_mode=self._settings.dark_mode)

    def render_document(self, text: str, base_dir: Path | None = None) -> str:
        return self._documents.render(text, base_dir=base_dir)

    def fetch_package(self, spec: str | PackageSpec) -> Path:
        if isinstance(spec, str):
            spec = PackageSpec.parse(spec)
        return self._world.ensure_package(spec)

    def close(self) -> None:
        self._cache_manager.persist()
        self._packages.close()

    def __enter__(self) -> Typmark:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _format(self, svg: str, align: float | None, mode: RenderMode) -> str:
        return format_svg(
            svg,
            align,
            mode,
            light_styles=self._light_styles,
            dark_styles=self._dark_styles,
            dark_mode=self._settings.dark_mode,
        )


# ── Module-level convenience functions ──


def render_document(text: str, base_dir: Path | None = None, **overrides: Any) -> str:
    """Render a markdown document with the resolved configuration."""
    with Typmark(RenderSettings.resolve(**overrides)) as renderer:
        return renderer.render_document(text, base_dir=base_dir)
