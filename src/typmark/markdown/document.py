"""Render a markdown document to HTML with math and diagrams as images."""

from __future__ import annotations

import html
import logging
from collections.abc import Iterator
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.dollarmath import dollarmath_plugin
from pydantic import BaseModel

from typmark.concurrency.pool import RenderPool
from typmark.markdown.codeblock import render_code_block
from typmark.markdown.fence import FenceSettings
from typmark.render.themer import format_svg
from typmark.types import RenderMode, RenderRequest

if TYPE_CHECKING:
    from typmark.render.diagram import DiagramCompiler
    from typmark.render.mathml import MathMLRenderer
    from typmark.render.pipeline import MathRenderer

logger = logging.getLogger(__name__)

_MATH_MODES = {
    "math_inline": RenderMode.INLINE,
    "math_inline_double": RenderMode.DISPLAY,
    "math_block": RenderMode.DISPLAY,
    "math_block_label": RenderMode.DISPLAY,
}
_FRAGMENT_KEY = "typmark_fragment"
_RESULTS_KEY = "typmark_results"
_FRAGMENTS_KEY = "typmark_fragments"


class FragmentKind(StrEnum):
    MATH = "math"
    TYPST = "typst"
    PIKCHR = "pikchr"


class Fragment(BaseModel):
    kind: FragmentKind
    source: str
    mode: RenderMode = RenderMode.RAW
    settings: FenceSettings | None = None


def build_parser() -> MarkdownIt:
    """CommonMark plus tables, strikethrough and ``$``/``$$`` math tokens.

    A ``$`` followed by whitespace or preceded by a digit does not open
    math, so prices stay text.
    """
    md = MarkdownIt("commonmark", {"html": True}).enable("table").enable("strikethrough")
    md.use(dollarmath_plugin, allow_space=False, allow_digits=False, double_inline=True)
    return md


def find_fragments(tokens: list[Token], base_dir: Path | None = None) -> list[Fragment]:
    """Collect renderable fragments in document order.

    Each token that produced a fragment is tagged with its index in the
    returned list.
    """
    fragments: list[Fragment] = []
    for token in _walk(tokens):
        fragment = _fragment_for(token, base_dir)
        if fragment is not None:
            token.meta[_FRAGMENT_KEY] = len(fragments)
            fragments.append(fragment)
    return fragments


class DocumentRenderer:
    """Parses markdown, renders its fragments in parallel, emits HTML.

    Fenced ``pikchr`` and ``typst`` blocks become diagrams and raw typst
    renders; ``$$...$$`` and ``$...$`` become display and inline math.
    Code spans, indented code and other fences are never scanned for math.
    When a MathML renderer is given, math is emitted as ``<math>`` markup
    instead of images.
    """

    def __init__(
        self,
        math: MathRenderer,
        diagrams: DiagramCompiler,
        pool: RenderPool | None = None,
        light_styles: str | None = None,
        dark_styles: str | None = None,
        dark_mode: bool = False,
        preamble: str | None = None,
        fail_on_error: bool = True,
        mathml: MathMLRenderer | None = None,
    ) -> None:
        self._math = math
        self._diagrams = diagrams
        self._pool = pool or RenderPool()
        self._light_styles = light_styles
        self._dark_styles = dark_styles
        self._dark_mode = dark_mode
        self._preamble = preamble
        self._fail_on_error = fail_on_error
        self._mathml = mathml
        self._md = build_parser()
        self._install_rules()

    def render(self, text: str, base_dir: Path | None = None) -> str:
        env: dict[str, Any] = {"base_dir": base_dir}
        tokens = self._md.parse(text, env)
        fragments = find_fragments(tokens, base_dir)
        logger.debug("Rendering %d fragments", len(fragments))

        results = self._pool.process_batch(self.render_fragment, fragments)
        if self._fail_on_error:
            for result in results:
                if isinstance(result, Exception):
                    raise result

        env[_FRAGMENTS_KEY] = fragments
        env[_RESULTS_KEY] = results
        return self._md.renderer.render(tokens, self._md.options, env)

    def render_fragment(self, fragment: Fragment) -> str:
        if fragment.kind == FragmentKind.PIKCHR:
            return self._diagrams.render(fragment.source, dark_mode=self._dark_mode)

        if fragment.kind == FragmentKind.MATH and self._mathml is not None:
            return self._mathml.render(fragment.source, fragment.mode)

        rendered = self._math.render(
            RenderRequest(source=fragment.source, mode=fragment.mode, extra_styles=self._preamble)
        )
        return format_svg(
            rendered.content,
            rendered.align,
            fragment.mode,
            light_styles=self._light_styles,
            dark_styles=self._dark_styles,
            dark_mode=self._dark_mode,
        )

    def _install_rules(self) -> None:
        rules = self._md.renderer.rules
        default_fence = rules["fence"]

        def math_inline(tokens, idx, options, env):
            return _result_markup(tokens[idx], env, block=False)

        def math_block(tokens, idx, options, env):
            token = tokens[idx]
            return f'<div class="typmark-math">{_result_markup(token, env, block=True)}</div>\n'

        def fence(tokens, idx, options, env):
            token = tokens[idx]
            if _FRAGMENT_KEY in token.meta:
                fragment = env[_FRAGMENTS_KEY][token.meta[_FRAGMENT_KEY]]
                attrs = fragment.settings.wrapper_attrs() if fragment.settings else ""
                return (
                    f'<div class="typmark-{fragment.kind.value}"{attrs}>'
                    f"{_result_markup(token, env, block=True)}</div>\n"
                )

            settings = FenceSettings.parse(token.info)
            included = settings.include_source(env.get("base_dir"))
            if included is None and not settings.has_annotations:
                return default_fence(tokens, idx, options, env)
            return render_code_block(included if included is not None else token.content, settings)

        rules["math_inline"] = math_inline
        rules["math_inline_double"] = math_inline
        rules["math_block"] = math_block
        rules["math_block_label"] = math_block
        rules["fence"] = fence


def _walk(tokens: list[Token]) -> Iterator[Token]:
    for token in tokens:
        yield token
        if token.children:
            yield from _walk(token.children)


def _fragment_for(token: Token, base_dir: Path | None) -> Fragment | None:
    mode = _MATH_MODES.get(token.type)
    if mode is not None:
        source = token.content.strip() if mode == RenderMode.DISPLAY else token.content
        return Fragment(kind=FragmentKind.MATH, source=source, mode=mode)
    if token.type != "fence":
        return None

    settings = FenceSettings.parse(token.info)
    language = (settings.language or "").lower()
    if language not in (FragmentKind.PIKCHR, FragmentKind.TYPST):
        return None

    source = settings.include_source(base_dir)
    if source is None:
        source = token.content
    return Fragment(
        kind=FragmentKind(language),
        source=settings.visible_source(source),
        mode=RenderMode.RAW,
        settings=settings,
    )


def _result_markup(token: Token, env: dict[str, Any], block: bool) -> str:
    result = env[_RESULTS_KEY][token.meta[_FRAGMENT_KEY]]
    if not isinstance(result, Exception):
        return result
    message = html.escape(str(result))
    if block:
        return f'<pre class="typmark-error">{message}</pre>'
    return f'<code class="typmark-error">{message}</code>'
