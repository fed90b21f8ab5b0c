"""Turn a compiled SVG into themed, baseline-aligned ``<img>`` markup."""

from __future__ import annotations

import re
from functools import cache
from importlib import resources
from urllib.parse import quote

from typmark.types import RenderMode, Theme, ThemedImage

EM_PER_PT = 11.0
RAW_HEIGHT_PADDING = 10.0

_HEIGHT_RE = re.compile(r'(?<![\w-])height="([^"]*?)pt"')
_WIDTH_RE = re.compile(r'(?<![\w-])width="([^"]*?)pt"')
_SVG_OPEN_RE = re.compile(r"<svg\b[^>]*>")
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_BETWEEN_TAGS_RE = re.compile(r">\s+<")

_MODE_CLASSES = {
    RenderMode.DISPLAY: "typst-display",
    RenderMode.INLINE: "typst-inline",
    RenderMode.RAW: "typst-display",
}


@cache
def default_styles(theme: Theme) -> str:
    """Bundled stylesheet for ``theme``."""
    return resources.files("typmark.styles").joinpath(f"{theme.value}.css").read_text("utf-8")


def extract_height(svg: str) -> float:
    return _extract_pt(_HEIGHT_RE, svg)


def extract_width(svg: str) -> float:
    return _extract_pt(_WIDTH_RE, svg)


def compute_shift_em(height: float, align: float) -> float:
    """Distance in em to move an image down so its pin sits on the baseline."""
    return (height - align) / EM_PER_PT


def pad_height(svg: str, height: float, padding: float = RAW_HEIGHT_PADDING) -> str:
    """Rewrite the first height attribute; the artwork itself is untouched."""
    return _HEIGHT_RE.sub(f'height="{height + padding}pt"', svg, count=1)


def inject_style(svg: str, css: str) -> str:
    """Insert ``<style>`` right after the first opening ``<svg ...>`` tag."""
    match = _SVG_OPEN_RE.search(svg)
    if match is None:
        return svg
    end = match.end()
    return f"{svg[:end]}<style>{css}</style>{svg[end:]}"


def minify_svg(svg: str) -> str:
    """Drop comments and whitespace between tags."""
    svg = _COMMENT_RE.sub("", svg)
    return _BETWEEN_TAGS_RE.sub("><", svg).strip()


def data_uri(svg: str, charset: bool = False) -> str:
    prefix = "data:image/svg+xml;charset=utf-8," if charset else "data:image/svg+xml,"
    return prefix + quote(svg, safe="")


def themed_variants(
    svg: str,
    light_styles: str | None = None,
    dark_styles: str | None = None,
    dark_mode: bool = False,
) -> list[ThemedImage]:
    """Light variant always, dark variant only when requested."""
    images = [
        ThemedImage(
            svg=inject_style(svg, light_styles or default_styles(Theme.LIGHT)),
            theme=Theme.LIGHT,
        )
    ]
    if dark_mode:
        images.append(
            ThemedImage(
                svg=inject_style(svg, dark_styles or default_styles(Theme.DARK)),
                theme=Theme.DARK,
            )
        )
    return images


def format_svg(
    svg: str,
    align: float | None,
    mode: RenderMode,
    light_styles: str | None = None,
    dark_styles: str | None = None,
    dark_mode: bool = False,
) -> str:
    """Build the HTML fragment for one compiled render.

    A vertical-align rule is only written when ``align`` is known; Raw
    renders never carry one.
    """
    height = extract_height(svg)
    width = extract_width(svg)
    if mode == RenderMode.RAW:
        svg = pad_height(svg, height)
        align = None

    style = ""
    if align is not None:
        style += f"vertical-align: -{compute_shift_em(height, align):.4f}em;"
    if width > 0:
        style += f"{' ' if style else ''}width: {width / EM_PER_PT:.4f}em;"

    mode_class = _MODE_CLASSES[mode]
    style_attr = f' style="{style}"' if style else ""
    return "".join(
        f'<img src="{data_uri(image.svg)}" class="{mode_class} typst-doc typst-{image.theme.value}"'
        f'{style_attr} loading="lazy" decoding="async" alt="" />'
        for image in themed_variants(svg, light_styles, dark_styles, dark_mode)
    )


def _extract_pt(pattern: re.Pattern[str], svg: str) -> float:
    match = pattern.search(svg)
    if match is None:
        return 0.0
    try:
        return float(match.group(1))
    except ValueError:
        return 0.0
