"""Rendering — compile math and diagrams, then theme the SVG output."""

from typmark.render.diagram import DiagramCompiler
from typmark.render.mathml import MathMLRenderer
from typmark.render.pipeline import MathRenderer
from typmark.render.themer import format_svg

__all__ = ["DiagramCompiler", "MathMLRenderer", "MathRenderer", "format_svg"]
