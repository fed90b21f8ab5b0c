"""Custom exception hierarchy for typmark."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from typmark.engine.base import Diagnostic


class TypmarkError(Exception):
    """Base exception for all typmark errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


# ── File resolution ──


class FileError(TypmarkError):
    """A file the compiler asked for could not be served."""

    def __init__(self, message: str = "", path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class NotFoundError(FileError):
    """Unresolvable file or package path. Permanent, never retried."""


class InvalidEncodingError(FileError):
    """File bytes are not valid UTF-8 but a textual source was requested."""


class FileAccessError(FileError):
    """The file exists but could not be read (permissions, I/O)."""


# ── Packages ──


class PackageError(TypmarkError):
    """Fetching or unpacking a package failed.

    The partially created package directory is always removed before this is
    raised, so a later attempt starts from a clean state.
    """

    def __init__(
        self,
        message: str = "",
        package: str | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.package = package
        self.original = original


class NetworkFailedError(PackageError):
    """Download failed (connection error, timeout, non-2xx status)."""

    def __init__(
        self,
        message: str = "",
        package: str | None = None,
        http_status: int | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message, package=package, original=original)
        self.http_status = http_status


class MalformedArchiveError(PackageError):
    """Downloaded archive could not be decompressed or unpacked."""


# ── Compilation ──


class CompileError(TypmarkError):
    """A render failed inside the typesetting engine. No partial output."""

    def __init__(
        self,
        message: str = "",
        diagnostics: list[Diagnostic] | None = None,
    ) -> None:
        super().__init__(message)
        self.diagnostics = list(diagnostics or [])


class CompileWarningError(CompileError):
    """The compiler emitted warnings; warnings are fatal for a render."""


class CompileDiagnosticError(CompileError):
    """The compiler reported errors."""


class NoPagesError(CompileError):
    """The compiled document has no pages."""


class DiagramError(TypmarkError):
    """The diagram engine rejected its input."""


class EngineError(TypmarkError):
    """An external engine could not be started or crashed."""

    def __init__(self, message: str = "", command: list[str] | None = None) -> None:
        super().__init__(message)
        self.command = command


class UsageError(TypmarkError):
    """API misuse, e.g. asking a math-only path to render Raw mode."""


# ── Cache persistence ──


class CacheIoError(TypmarkError):
    """Writing a cache file failed. The in-memory cache is left as it was."""

    def __init__(
        self,
        message: str = "",
        path: Path | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.original = original


class CacheLoadError(CacheIoError):
    """A cache file exists but cannot be read back. Fatal at startup."""
