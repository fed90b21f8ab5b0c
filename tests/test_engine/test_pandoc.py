"""Tests for the pandoc MathML engine."""

import subprocess

import pytest

from typmark.engine.pandoc import PandocMathMLEngine
from typmark.errors.exceptions import CompileError, EngineError

PANDOC_OUTPUT = (
    '<p><math display="inline" xmlns="http://www.w3.org/1998/Math/MathML">'
    "<semantics><msup><mi>x</mi><mn>2</mn></msup></semantics></math></p>\n"
)


def _fake_run(stdout=PANDOC_OUTPUT, returncode=0, stderr=""):
    calls = []

    def run(command, **kwargs):
        calls.append((command, kwargs.get("input")))
        return subprocess.CompletedProcess(command, returncode, stdout, stderr)

    return run, calls


class TestPandocMathMLEngine:
    def test_extracts_math_element(self, monkeypatch):
        run, calls = _fake_run()
        monkeypatch.setattr("typmark.engine.pandoc.subprocess.run", run)
        markup = PandocMathMLEngine().convert("$x^2$")
        assert markup.startswith('<math display="inline"')
        assert markup.endswith("</math>")
        command, stdin = calls[0]
        assert command == ["pandoc", "--from=typst", "--to=html5", "--mathml"]
        assert stdin == "$x^2$"

    def test_custom_binary(self, monkeypatch):
        run, calls = _fake_run()
        monkeypatch.setattr("typmark.engine.pandoc.subprocess.run", run)
        PandocMathMLEngine("/opt/pandoc").convert("$x$")
        assert calls[0][0][0] == "/opt/pandoc"

    def test_nonzero_exit(self, monkeypatch):
        run, _ = _fake_run(stdout="", returncode=64, stderr="unexpected end of input")
        monkeypatch.setattr("typmark.engine.pandoc.subprocess.run", run)
        with pytest.raises(CompileError, match="unexpected end of input"):
            PandocMathMLEngine().convert("$x")

    def test_output_without_math(self, monkeypatch):
        run, _ = _fake_run(stdout="<p>x</p>\n")
        monkeypatch.setattr("typmark.engine.pandoc.subprocess.run", run)
        with pytest.raises(CompileError):
            PandocMathMLEngine().convert("x")

    def test_missing_binary(self):
        with pytest.raises(EngineError) as exc_info:
            PandocMathMLEngine("typmark-no-such-pandoc").convert("$x$")
        assert exc_info.value.command[0] == "typmark-no-such-pandoc"
