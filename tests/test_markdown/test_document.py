"""Tests for document-level rendering."""

import pytest

from typmark.cache.store import ContentCache
from typmark.concurrency.pool import RenderPool
from typmark.errors.exceptions import DiagramError
from typmark.markdown.document import (
    DocumentRenderer,
    Fragment,
    FragmentKind,
    build_parser,
    find_fragments,
)
from typmark.render.diagram import DiagramCompiler
from typmark.render.mathml import MathMLRenderer
from typmark.render.pipeline import MathRenderer
from typmark.types import RenderedMath, RenderMode


def _fragments(text, base_dir=None):
    return find_fragments(build_parser().parse(text), base_dir)


class TestFindFragments:
    def test_inline_math(self):
        assert _fragments("Energy $E = mc^2$ here.") == [
            Fragment(kind=FragmentKind.MATH, source="E = mc^2", mode=RenderMode.INLINE)
        ]

    def test_display_math(self):
        (fragment,) = _fragments("Before\n$$\n  x^2\n$$\nAfter")
        assert fragment.mode == RenderMode.DISPLAY
        assert fragment.source == "x^2"

    def test_inline_code_untouched(self):
        assert _fragments("Use `$x$` literally") == []

    def test_indented_code_untouched(self):
        assert _fragments("    indented code $a$\n") == []

    def test_fence_in_list_untouched(self):
        assert _fragments('- item\n\n  ~~~sh\n  echo "$HOME$x"\n  ~~~\n') == []

    def test_unclosed_fence_untouched(self):
        assert _fragments("```python\nx = '$a$'\n") == []

    def test_currency_is_not_math(self):
        assert _fragments("costs $5 and $6 more") == []

    def test_escaped_dollar(self):
        assert _fragments(r"a \$x$ b") == []

    def test_math_inside_emphasis(self):
        (fragment,) = _fragments("*see $a_1$*")
        assert fragment.source == "a_1"

    def test_pikchr_fence(self):
        (fragment,) = _fragments('Intro\n```pikchr\nbox "A"\n```\nOutro\n')
        assert fragment.kind == FragmentKind.PIKCHR
        assert fragment.source == 'box "A"\n'

    def test_typst_fence_is_raw(self):
        (fragment,) = _fragments("~~~typst\n#box[hi]\n~~~\n")
        assert fragment.kind == FragmentKind.TYPST
        assert fragment.mode == RenderMode.RAW

    def test_other_fences_untouched(self):
        assert _fragments("```python\nprice = '$5' + '$x$'\n```\n") == []

    def test_fence_include(self, tmp_path):
        (tmp_path / "flow.pikchr").write_text("arrow")
        (fragment,) = _fragments("```pikchr, include=flow.pikchr\n```\n", base_dir=tmp_path)
        assert fragment.source == "arrow"

    def test_hidden_lines_not_compiled(self):
        (fragment,) = _fragments("```typst, hide_lines=1\n#set text(red)\n#box[a]\n```\n")
        assert fragment.source == "#box[a]\n"
        assert fragment.settings.hide_lines == [(1, 1)]

    def test_order_preserved(self):
        assert [f.source for f in _fragments("$a$ then $$b$$")] == ["a", "b"]

    def test_tokens_tagged_with_index(self):
        tokens = build_parser().parse("$a$\n\n```pikchr\nbox\n```\n")
        fragments = find_fragments(tokens)
        (fence,) = [t for t in tokens if t.type == "fence"]
        assert fragments[fence.meta["typmark_fragment"]].kind == FragmentKind.PIKCHR


@pytest.fixture
def document_renderer(world, typeset_engine, diagram_engine):
    def build(**kwargs):
        math = MathRenderer(world, typeset_engine, cache=ContentCache(RenderedMath))
        diagrams = DiagramCompiler(diagram_engine, cache=ContentCache(str))
        return DocumentRenderer(math, diagrams, pool=RenderPool(max_workers=2), **kwargs)

    return build


class TestDocumentRenderer:
    def test_replaces_all_fragments(self, document_renderer):
        text = "Inline $x$.\n\n$$y$$\n\n```pikchr\nbox\n```\n\n```typst\n#box[z]\n```\n"
        html = document_renderer().render(text)
        assert html.startswith("<p>Inline <img ")
        assert 'class="typst-inline typst-doc typst-light"' in html
        assert html.count('class="typst-display typst-doc typst-light"') == 2
        assert '<div class="typmark-math"><img ' in html
        assert '<div class="typmark-pikchr"><img ' in html
        assert '<div class="typmark-typst"><img ' in html
        assert "<code" not in html

    def test_plain_markdown(self, document_renderer, typeset_engine):
        html = document_renderer().render("# Title\n\nNo math here.\n")
        assert html == "<h1>Title</h1>\n<p>No math here.</p>\n"
        assert typeset_engine.calls == []

    def test_code_left_as_code(self, document_renderer, typeset_engine):
        html = document_renderer().render("    $a$\n\nand `$b$`\n")
        assert "<pre><code>$a$\n</code></pre>" in html
        assert "<code>$b$</code>" in html
        assert typeset_engine.calls == []

    def test_dark_mode(self, document_renderer):
        html = document_renderer(dark_mode=True).render("$x$")
        assert "typst-light" in html
        assert "typst-dark" in html

    def test_preamble_passed_to_compiles(self, document_renderer, typeset_engine):
        document_renderer(preamble="#set text(font: \"Libertinus\")").render("$x$")
        assert '#set text(font: "Libertinus")' in typeset_engine.calls[0][0]

    def test_failure_raises_by_default(self, document_renderer):
        with pytest.raises(DiagramError):
            document_renderer().render("```pikchr\nfail\n```\n")

    def test_failure_placeholder(self, document_renderer):
        html = document_renderer(fail_on_error=False).render(
            "ok $x$\n```pikchr\nfail <now>\n```\n"
        )
        assert '<pre class="typmark-error">' in html
        assert "fail &lt;now&gt;" in html
        assert "Failed to render pikchr" in html
        assert "typst-inline" in html

    def test_repeated_spans_compile_once(self, document_renderer, typeset_engine):
        document_renderer(fail_on_error=True).render("$x$ and $x$")
        assert 1 <= len(typeset_engine.calls) <= 2

    def test_fence_name_and_copy(self, document_renderer):
        html = document_renderer().render("```pikchr, name=flow, copy\nbox\n```\n")
        assert '<div class="typmark-pikchr" data-name="flow" data-copy><img ' in html

    def test_annotated_code_block(self, document_renderer):
        html = document_renderer().render("```python, linenos, hl_lines=2\na = 1\nb = 2\n```\n")
        assert '<pre data-lang="python">' in html
        assert '<span class="line hl"><span class="lineno">2</span>b = 2</span>' in html

    def test_plain_code_block(self, document_renderer):
        html = document_renderer().render("```python\na = 1\n```\n")
        assert html == '<pre><code class="language-python">a = 1\n</code></pre>\n'

    def test_code_block_include(self, document_renderer, tmp_path):
        (tmp_path / "snippet.py").write_text("print('hi')\n")
        html = document_renderer().render("```python, include=snippet.py\n```\n", base_dir=tmp_path)
        assert "print(&#x27;hi&#x27;)" in html


class TestMathMLOutput:
    @pytest.fixture
    def renderer(self, document_renderer, mathml_engine):
        return document_renderer(mathml=MathMLRenderer(mathml_engine, cache=ContentCache(str)))

    def test_math_becomes_mathml(self, renderer, mathml_engine, typeset_engine):
        html = renderer.render("Inline $x$.\n\n$$y$$\n")
        assert '<p>Inline <math display="inline">' in html
        assert '<div class="typmark-math"><math display="block">' in html
        assert sorted(mathml_engine.calls) == ["$ y $", "$x$"]
        assert typeset_engine.calls == []

    def test_typst_fences_stay_svg(self, renderer, typeset_engine):
        html = renderer.render("```typst\n#box[a]\n```\n")
        assert '<div class="typmark-typst"><img ' in html
        assert len(typeset_engine.calls) == 1

    def test_inline_failure_placeholder(self, document_renderer, mathml_engine):
        renderer = document_renderer(
            mathml=MathMLRenderer(mathml_engine), fail_on_error=False
        )
        html = renderer.render("a $fail$ b")
        assert '<code class="typmark-error">' in html
