"""Jinja2 templates that turn a math span or typst block into a document."""

from __future__ import annotations

from jinja2 import StrictUndefined
from jinja2.sandbox import SandboxedEnvironment

from typmark.types import RenderMode

ALIGN_LABEL = "label"

_DISPLAY = """
#set page(height: auto, width: auto, margin: 0pt, fill: none)
#set text(14pt)
{{ preamble }}
$ {{ code }} $
"""

# The pin measures its own vertical position as a line length, so the
# queried metadata is the baseline offset of the expression in pt.
_INLINE = """
#set page(height: auto, width: auto, margin: 0pt, fill: none)
#set text(13pt)
#let s = state("t", (:))

#let pin(t) = context {
    let computed = measure(
        line(length: here().position().y)
    )
    s.update(it => it.insert(t, computed.width) + it)
    }

#show math.equation: it => {
    box(it, inset: (top: 0.5em, bottom: 0.5em))
    }
{{ preamble }}
$pin("l1"){{ code }}$

#context [
    #metadata(s.final().at("l1")) <{{ label }}>
]
"""

_RAW = """
#set page(height: auto, width: auto, margin: 0pt, fill: none)
#set text(16pt)
{{ preamble }}
{{ code }}
"""

_jinja_env = SandboxedEnvironment(
    autoescape=False,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)

_TEMPLATES = {
    RenderMode.DISPLAY: _jinja_env.from_string(_DISPLAY),
    RenderMode.INLINE: _jinja_env.from_string(_INLINE),
    RenderMode.RAW: _jinja_env.from_string(_RAW),
}


def build_document(code: str, mode: RenderMode, preamble: str | None = None) -> str:
    """Render the compiler input for ``code`` in ``mode``."""
    return _TEMPLATES[mode].render(code=code, preamble=preamble or "", label=ALIGN_LABEL)


def display_math(code: str, preamble: str | None = None) -> str:
    return build_document(code, RenderMode.DISPLAY, preamble)


def inline_math(code: str, preamble: str | None = None) -> str:
    return build_document(code, RenderMode.INLINE, preamble)


def raw_document(code: str, preamble: str | None = None) -> str:
    return build_document(code, RenderMode.RAW, preamble)
