"""Call contracts for the external typesetting and diagram engines."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from typmark.world.session import RenderSession


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    severity: Severity
    message: str
    location: str | None = None
    hints: list[str] = Field(default_factory=list)

    def format(self) -> str:
        head = f"{self.severity.value}: {self.message}"
        if self.location:
            head = f"{self.location}: {head}"
        return "\n".join([head, *(f"  hint: {h}" for h in self.hints)])


class CompileOutput(BaseModel):
    """Everything one compile produced.

    ``pages`` holds one SVG document per page. ``label_value`` is the value
    found by the label query in pt, None when no query ran or it matched
    nothing.
    """

    pages: list[str] = Field(default_factory=list)
    warnings: list[Diagnostic] = Field(default_factory=list)
    errors: list[Diagnostic] = Field(default_factory=list)
    label_value: float | None = None


class TypesetEngine(Protocol):
    def compile(self, session: RenderSession, query_label: str | None = None) -> CompileOutput:
        """Compile the session's main file to SVG pages.

        When ``query_label`` is given, also look up the metadata attached to
        that label and report its length in pt.
        """
        ...


class MathMLEngine(Protocol):
    def convert(self, source: str) -> str:
        """Convert one typst equation, ``$...$`` delimiters included, to MathML."""
        ...


class DiagramEngine(Protocol):
    def render(self, source: str, dark_mode: bool = False) -> str:
        """Render diagram source to an SVG string."""
        ...


def format_diagnostics(diagnostics: list[Diagnostic]) -> str:
    return "\n".join(d.format() for d in diagnostics)
