"""Error handling — exception hierarchy shared by every render path."""

from typmark.errors.exceptions import (
    CacheIoError,
    CacheLoadError,
    CompileDiagnosticError,
    CompileError,
    CompileWarningError,
    DiagramError,
    EngineError,
    FileAccessError,
    FileError,
    InvalidEncodingError,
    MalformedArchiveError,
    NetworkFailedError,
    NoPagesError,
    NotFoundError,
    PackageError,
    TypmarkError,
    UsageError,
)

__all__ = [
    "TypmarkError",
    "FileError",
    "NotFoundError",
    "InvalidEncodingError",
    "FileAccessError",
    "PackageError",
    "NetworkFailedError",
    "MalformedArchiveError",
    "CompileError",
    "CompileWarningError",
    "CompileDiagnosticError",
    "NoPagesError",
    "DiagramError",
    "EngineError",
    "UsageError",
    "CacheIoError",
    "CacheLoadError",
]
