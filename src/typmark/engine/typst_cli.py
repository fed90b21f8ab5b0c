"""Typeset engine driving the ``typst`` command-line compiler."""

from __future__ import annotations

import json
import logging
import re
import subprocess
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from typmark.engine.base import CompileOutput, Diagnostic, Severity
from typmark.errors.exceptions import EngineError
from typmark.world.files import FileId, PackageSpec

if TYPE_CHECKING:
    from typmark.world.session import RenderSession

logger = logging.getLogger(__name__)

_IMPORT_RE = re.compile(r'"(@[A-Za-z0-9_-]+/[A-Za-z0-9_-]+:\d+\.\d+\.\d+)"')
_DIAGNOSTIC_RE = re.compile(r"^(?:(?P<location>.+?): )?(?P<severity>error|warning): (?P<message>.*)$")
_HINT_RE = re.compile(r"^\s*(?:=\s*)?hint: (?P<hint>.*)$")
_LENGTH_RE = re.compile(r"^(?P<value>-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)(?P<unit>pt|mm|cm|in)?$")
_PAGE_RE = re.compile(r"^page-(\d+)\.svg$")

_PT_PER_UNIT = {"pt": 1.0, "mm": 72 / 25.4, "cm": 72 / 2.54, "in": 72.0}


class TypstCliEngine:
    """Compile sessions with the typst binary.

    The main file is written to a fresh temporary root for each compile.
    Fonts come from the binary's embedded set plus the catalog's
    directories; host fonts are only consulted when ``system_fonts`` is set.
    Packages are materialized through the world's package store first, and
    the compiler is pointed at that same directory, so it never downloads
    anything on its own.
    """

    def __init__(self, binary: str = "typst", system_fonts: bool = False) -> None:
        self._binary = binary
        self._system_fonts = system_fonts

    def compile(self, session: RenderSession, query_label: str | None = None) -> CompileOutput:
        prepare_packages(session)

        with tempfile.TemporaryDirectory(prefix="typmark-") as tmp:
            root = Path(tmp)
            main = root / session.main.path.lstrip("/")
            main.write_text(session.main_source, encoding="utf-8")

            command = [
                self._binary,
                "compile",
                *self._common_args(session, root),
                "--format",
                "svg",
                "--diagnostic-format",
                "short",
                "--creation-timestamp",
                str(int(session.timestamp.timestamp())),
                str(main),
                str(root / "page-{p}.svg"),
            ]
            completed = self._run(command)
            warnings, errors = parse_diagnostics(completed.stderr)
            if completed.returncode != 0 and not errors:
                errors.append(
                    Diagnostic(
                        severity=Severity.ERROR,
                        message=completed.stderr.strip() or f"typst exited with {completed.returncode}",
                    )
                )

            output = CompileOutput(warnings=warnings, errors=errors)
            if errors:
                return output

            output.pages = _collect_pages(root)
            if query_label and output.pages and not warnings:
                output.label_value = self._query_length(session, root, main, query_label)
            return output

    def _query_length(
        self, session: RenderSession, root: Path, main: Path, label: str
    ) -> float | None:
        command = [
            self._binary,
            "query",
            *self._common_args(session, root),
            str(main),
            f"<{label}>",
            "--field",
            "value",
            "--one",
        ]
        completed = self._run(command)
        if completed.returncode != 0:
            logger.debug("Label query for <%s> failed: %s", label, completed.stderr.strip())
            return None
        return parse_length(completed.stdout)

    def _common_args(self, session: RenderSession, root: Path) -> list[str]:
        args = [
            "--root",
            str(root),
            "--package-cache-path",
            str(session.world.package_root),
        ]
        for directory in session.fonts.directories:
            args += ["--font-path", str(directory)]
        if not self._system_fonts:
            args.append("--ignore-system-fonts")
        for key, value in session.library.inputs.items():
            args += ["--input", f"{key}={value}"]
        if session.library.features:
            args += ["--features", ",".join(session.library.features)]
        return args

    def _run(self, command: list[str]) -> subprocess.CompletedProcess[str]:
        logger.debug("Running %s", " ".join(command))
        try:
            return subprocess.run(command, capture_output=True, text=True, check=False)
        except OSError as e:
            raise EngineError(f"Cannot run {self._binary}: {e}", command=command) from e


def prepare_packages(session: RenderSession) -> list[PackageSpec]:
    """Make every package the session imports available, transitively.

    Package sources are read through the session, so they land in the
    world's file table and a file that is not UTF-8 fails the compile.
    """
    pending = find_imports(session.main_source)
    done: list[PackageSpec] = []
    while pending:
        spec = pending.pop()
        if spec in done:
            continue
        package_dir = session.world.ensure_package(spec)
        done.append(spec)
        for path in sorted(package_dir.rglob("*.typ")):
            file_id = FileId(package=spec, path=f"/{path.relative_to(package_dir).as_posix()}")
            pending.extend(find_imports(session.source(file_id)))
    return done


def find_imports(source: str) -> list[PackageSpec]:
    return [PackageSpec.parse(m.group(1)) for m in _IMPORT_RE.finditer(source)]


def parse_diagnostics(stderr: str) -> tuple[list[Diagnostic], list[Diagnostic]]:
    """Split ``--diagnostic-format short`` output into (warnings, errors)."""
    warnings: list[Diagnostic] = []
    errors: list[Diagnostic] = []
    last: Diagnostic | None = None
    for line in stderr.splitlines():
        if match := _DIAGNOSTIC_RE.match(line.strip()):
            last = Diagnostic(
                severity=Severity(match["severity"]),
                message=match["message"],
                location=match["location"],
            )
            (errors if last.severity == Severity.ERROR else warnings).append(last)
        elif (match := _HINT_RE.match(line)) and last is not None:
            last.hints.append(match["hint"])
    return warnings, errors


def parse_length(raw: str) -> float | None:
    """Convert a queried length such as ``"4.25pt"`` to pt."""
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw.strip()
    if isinstance(value, int | float):
        return float(value)
    if not isinstance(value, str):
        return None
    match = _LENGTH_RE.match(value.strip())
    if match is None:
        return None
    return float(match["value"]) * _PT_PER_UNIT[match["unit"] or "pt"]


def _collect_pages(root: Path) -> list[str]:
    numbered = []
    for path in root.iterdir():
        if match := _PAGE_RE.match(path.name):
            numbered.append((int(match.group(1)), path))
    return [path.read_text(encoding="utf-8") for _, path in sorted(numbered)]
