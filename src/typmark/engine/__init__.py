"""Engines — external compilers behind small call contracts."""

from typmark.engine.base import (
    CompileOutput,
    DiagramEngine,
    Diagnostic,
    MathMLEngine,
    Severity,
    TypesetEngine,
    format_diagnostics,
)
from typmark.engine.pandoc import PandocMathMLEngine
from typmark.engine.pikchr import PikchrCliEngine
from typmark.engine.typst_cli import TypstCliEngine

__all__ = [
    "CompileOutput",
    "Diagnostic",
    "DiagramEngine",
    "MathMLEngine",
    "PandocMathMLEngine",
    "PikchrCliEngine",
    "Severity",
    "TypesetEngine",
    "TypstCliEngine",
    "format_diagnostics",
]
