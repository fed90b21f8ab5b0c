"""File identifiers and lazily decoded virtual files."""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, ConfigDict

from typmark.errors.exceptions import InvalidEncodingError

_PACKAGE_RE = re.compile(
    r"^@(?P<namespace>[A-Za-z0-9_-]+)/(?P<name>[A-Za-z0-9_-]+):(?P<version>\d+\.\d+\.\d+)$"
)


class PackageSpec(BaseModel):
    """``@namespace/name:version`` as written in an import."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    name: str
    version: str

    @classmethod
    def parse(cls, text: str) -> PackageSpec:
        match = _PACKAGE_RE.match(text.strip())
        if match is None:
            raise ValueError(f"Invalid package spec: {text!r} (expected @namespace/name:x.y.z)")
        return cls(**match.groupdict())

    @property
    def subdir(self) -> PurePosixPath:
        return PurePosixPath(self.namespace, self.name, self.version)

    def __str__(self) -> str:
        return f"@{self.namespace}/{self.name}:{self.version}"


class FileId(BaseModel):
    """A file as the compiler names it: an optional package plus a rooted path."""

    model_config = ConfigDict(frozen=True)

    package: PackageSpec | None = None
    path: str

    def resolve(self, root: Path) -> Path | None:
        """Map this id onto ``root``; None if the path escapes it."""
        relative = PurePosixPath(self.path.lstrip("/"))
        if not relative.parts or ".." in relative.parts:
            return None
        candidate = (root / relative).resolve()
        if not candidate.is_relative_to(root.resolve()):
            return None
        return candidate

    def __str__(self) -> str:
        if self.package is None:
            return self.path
        return f"{self.package}{self.path}"


MAIN_FILE = FileId(path="/main.typ")


class VirtualFile:
    """Bytes of one file plus its text, decoded on first request."""

    def __init__(self, data: bytes) -> None:
        self._bytes = data
        self._source: str | None = None

    @property
    def data(self) -> bytes:
        return self._bytes

    def source(self, file_id: FileId | None = None) -> str:
        if self._source is None:
            try:
                self._source = self._bytes.decode("utf-8")
            except UnicodeDecodeError as e:
                name = str(file_id) if file_id else None
                raise InvalidEncodingError(
                    f"File is not valid UTF-8: {name or '<unnamed>'}", path=name
                ) from e
        return self._source
