"""Tests for compiler-input templates."""

from typmark.render.templates import (
    ALIGN_LABEL,
    build_document,
    display_math,
    inline_math,
    raw_document,
)
from typmark.types import RenderMode


class TestTemplates:
    def test_display(self):
        doc = display_math("x^2")
        assert "#set text(14pt)" in doc
        assert "$ x^2 $" in doc

    def test_inline_pins_and_labels(self):
        doc = inline_math("a + b")
        assert "#set text(13pt)" in doc
        assert '$pin("l1")a + b$' in doc
        assert f"<{ALIGN_LABEL}>" in doc

    def test_raw_passes_code_through(self):
        code = "#rect(width: 1cm)[{{ not jinja }}]"
        doc = raw_document(code)
        assert "#set text(16pt)" in doc
        assert code in doc

    def test_preamble_included(self):
        doc = display_math("x", preamble="#set text(fill: red)")
        assert "#set text(fill: red)" in doc

    def test_no_preamble_by_default(self):
        assert "None" not in display_math("x")

    def test_page_is_auto_sized(self):
        for mode in RenderMode:
            assert "#set page(height: auto, width: auto, margin: 0pt, fill: none)" in build_document(
                "x", mode
            )

    def test_modes_differ(self):
        docs = {build_document("x", mode) for mode in RenderMode}
        assert len(docs) == 3
