"""Tests for the Typmark façade."""

import pytest

from typmark.config.schema import RenderSettings
from typmark.core import Typmark, render_document
from typmark.errors.exceptions import UsageError
from typmark.types import MathFormat, RenderMode


@pytest.fixture
def settings(tmp_path):
    return RenderSettings(cache_dir=tmp_path / "cache")


@pytest.fixture
def make_typmark(settings, typeset_engine, diagram_engine, mathml_engine, registry):
    def build(**changes):
        return Typmark(
            settings.model_copy(update=changes),
            typeset_engine=typeset_engine,
            diagram_engine=diagram_engine,
            http_client=registry.client(),
            mathml_engine=mathml_engine,
        )

    return build


class TestTypmark:
    def test_render_math(self, make_typmark):
        with make_typmark() as tm:
            html = tm.render_math("x^2")
        assert 'class="typst-inline typst-doc typst-light"' in html

    def test_render_display(self, make_typmark):
        with make_typmark() as tm:
            assert "typst-display" in tm.render_math("x", RenderMode.DISPLAY)

    def test_raw_through_math_rejected(self, make_typmark):
        with make_typmark() as tm, pytest.raises(UsageError):
            tm.render_math("x", RenderMode.RAW)

    def test_render_typst(self, make_typmark):
        with make_typmark() as tm:
            html = tm.render_typst("#box[hi]")
        assert "vertical-align" not in html

    def test_render_diagram_dark(self, make_typmark):
        with make_typmark(dark_mode=True) as tm:
            html = tm.render_diagram("box")
        assert "pikchr-light" in html
        assert "pikchr-dark" in html

    def test_render_document(self, make_typmark):
        with make_typmark() as tm:
            html = tm.render_document("Value: $x$")
        assert html.startswith("<p>Value: <img ")

    def test_render_mathml(self, make_typmark, mathml_engine):
        with make_typmark() as tm:
            markup = tm.render_mathml("x^2", RenderMode.DISPLAY)
        assert markup.startswith('<math display="block">')
        assert mathml_engine.calls == ["$ x^2 $"]

    def test_mathml_raw_rejected(self, make_typmark):
        with make_typmark() as tm, pytest.raises(UsageError):
            tm.render_mathml("x", RenderMode.RAW)

    def test_mathml_cache_persisted(self, make_typmark, mathml_engine, settings):
        with make_typmark() as tm:
            first = tm.render_mathml("x")
        assert (settings.cache_dir / "math-mathml.bin").exists()

        with make_typmark() as tm:
            assert tm.render_mathml("x") == first
        assert len(mathml_engine.calls) == 1

    def test_document_in_mathml_format(self, make_typmark, typeset_engine):
        with make_typmark(math_format=MathFormat.MATHML) as tm:
            html = tm.render_document("Value: $x$\n\n```typst\n#box[a]\n```\n")
        assert '<p>Value: <math display="inline">' in html
        assert len(typeset_engine.calls) == 1
        assert "#box[a]" in typeset_engine.calls[0][0]

    def test_close_persists_and_reload_hits(self, make_typmark, typeset_engine, settings):
        with make_typmark() as tm:
            first = tm.render_math("x")
        assert (settings.cache_dir / "math-svg.bin").exists()

        with make_typmark() as tm:
            second = tm.render_math("x")
        assert first == second
        assert len(typeset_engine.calls) == 1

    def test_cache_disabled(self, make_typmark, typeset_engine, settings):
        with make_typmark(cache_disabled=True) as tm:
            tm.render_math("x")
            tm.render_math("x")
        assert len(typeset_engine.calls) == 2
        assert not (settings.cache_dir / "math-svg.bin").exists()

    def test_custom_styles(self, make_typmark, tmp_path):
        light = tmp_path / "light.css"
        light.write_text(".mine{}")
        with make_typmark(light_styles=light) as tm:
            html = tm.render_math("x")
        assert "mine" in html

    def test_fetch_package(self, make_typmark, registry, archive_bytes, settings):
        registry.packages["/preview/demo-0.1.0.tar.gz"] = archive_bytes({"lib.typ": ""})
        with make_typmark() as tm:
            path = tm.fetch_package("@preview/demo:0.1.0")
        assert path == settings.package_dir / "preview" / "demo" / "0.1.0"
        assert (path / "lib.typ").exists()

    def test_fetch_invalid_spec(self, make_typmark):
        with make_typmark() as tm, pytest.raises(ValueError):
            tm.fetch_package("cetz")


class TestRenderDocumentFunction:
    def test_plain_text(self, tmp_path):
        assert render_document("No math.", cache_dir=tmp_path / "c") == "<p>No math.</p>\n"
