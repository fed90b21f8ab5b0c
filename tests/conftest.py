import gzip
import html
import io
import tarfile
import threading

import httpx
import pytest

from typmark.engine.base import CompileOutput
from typmark.errors.exceptions import CompileError, DiagramError
from typmark.world.compiler_world import CompilerWorld
from typmark.world.packages import PackageStore

SAMPLE_SVG = (
    '<svg class="typst-doc" viewBox="0 0 20 20" width="20pt" height="20pt"'
    ' xmlns="http://www.w3.org/2000/svg">\n'
    '  <path fill="#000000" d="M0 0L10 10"/>\n'
    "</svg>"
)


class FakeTypesetEngine:
    """Counts compiles and returns a canned output."""

    def __init__(self, pages=None, warnings=None, errors=None, label_value=None):
        self.pages = [SAMPLE_SVG] if pages is None else pages
        self.warnings = warnings or []
        self.errors = errors or []
        self.label_value = label_value
        self.calls = []
        self._lock = threading.Lock()

    def compile(self, session, query_label=None):
        with self._lock:
            self.calls.append((session.main_source, query_label))
        return CompileOutput(
            pages=list(self.pages),
            warnings=list(self.warnings),
            errors=list(self.errors),
            label_value=self.label_value if query_label else None,
        )


class FakeDiagramEngine:
    """Echoes the source into an SVG; sources containing 'fail' are rejected."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def render(self, source, dark_mode=False):
        with self._lock:
            self.calls.append((source, dark_mode))
        if "fail" in source:
            raise DiagramError(f"Failed to render pikchr: {source.strip()}")
        theme = "dark" if dark_mode else "light"
        return f'<svg class="pikchr" data-theme="{theme}"><text>{source}</text></svg>'


class FakeMathMLEngine:
    """Wraps the equation in a <math> element; equations containing 'fail' are rejected."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def convert(self, source):
        with self._lock:
            self.calls.append(source)
        if "fail" in source:
            raise CompileError(f"Failed to convert to MathML: {source}")
        display = "block" if source.startswith("$ ") else "inline"
        return f'<math display="{display}"><mtext>{html.escape(source)}</mtext></math>'


def make_archive(files):
    """gzip-compressed tar holding ``files`` (name -> text)."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        for name, text in files.items():
            data = text.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return gzip.compress(buffer.getvalue())


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Keep user config files and TYPMARK_* variables out of every test."""
    import os

    from typmark.config import hierarchy

    for key in list(os.environ):
        if key.startswith("TYPMARK_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "no-such-home" / "config.yaml")
    monkeypatch.setattr(hierarchy, "_find_project_config", lambda: None)


@pytest.fixture
def sample_svg():
    return SAMPLE_SVG


@pytest.fixture
def typeset_engine():
    return FakeTypesetEngine()


@pytest.fixture
def diagram_engine():
    return FakeDiagramEngine()


@pytest.fixture
def mathml_engine():
    return FakeMathMLEngine()


@pytest.fixture
def archive_bytes():
    return make_archive


@pytest.fixture
def registry():
    """Mock package registry: ``registry.packages[url_path] = archive bytes``."""

    class Registry:
        def __init__(self):
            self.packages = {}
            self.requests = []
            self._lock = threading.Lock()

        def handler(self, request):
            with self._lock:
                self.requests.append(request.url.path)
            body = self.packages.get(request.url.path)
            if body is None:
                return httpx.Response(404)
            return httpx.Response(200, content=body)

        def client(self):
            return httpx.Client(transport=httpx.MockTransport(self.handler))

    return Registry()


@pytest.fixture
def package_store(tmp_path, registry):
    store = PackageStore(tmp_path / "packages", client=registry.client())
    yield store
    store.close()


@pytest.fixture
def world(package_store):
    return CompilerWorld(package_store)
