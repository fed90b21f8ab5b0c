"""typmark — render typst math and pikchr diagrams for markdown pages."""

from typmark.core import Typmark, render_document
from typmark.types import MathFormat, RenderedMath, RenderMode, RenderRequest, Theme, ThemedImage

__version__ = "0.1.0"

__all__ = [
    "MathFormat",
    "RenderMode",
    "RenderRequest",
    "RenderedMath",
    "Theme",
    "ThemedImage",
    "Typmark",
    "render_document",
]
