"""Shared Pydantic models for typmark."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

# ── Enums ──


class RenderMode(StrEnum):
    DISPLAY = "display"
    INLINE = "inline"
    RAW = "raw"


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"


class MathFormat(StrEnum):
    SVG = "svg"
    MATHML = "mathml"


# ── Runtime models ──


class RenderRequest(BaseModel):
    """One math span or typst block handed over by the markdown layer."""

    source: str
    mode: RenderMode = RenderMode.INLINE
    extra_styles: str | None = None


class RenderedMath(BaseModel):
    """A compiled page plus its baseline pin, as stored in the math cache.

    ``align`` is the horizontal offset of the inline marker in pt. Raw
    renders have no marker and carry ``None``.
    """

    model_config = ConfigDict(frozen=True)

    content: str
    align: float | None = None


class ThemedImage(BaseModel):
    svg: str
    theme: Theme
