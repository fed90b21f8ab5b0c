"""The virtual filesystem and static resources a typeset compile queries."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from typmark.errors.exceptions import FileAccessError, NotFoundError
from typmark.world.files import FileId, PackageSpec, VirtualFile
from typmark.world.fonts import FontCatalog, FontFace

if TYPE_CHECKING:
    from pathlib import Path

    from typmark.world.packages import PackageStore
    from typmark.world.session import RenderSession

logger = logging.getLogger(__name__)


class Library(BaseModel):
    """Static settings handed to every compile.

    ``inputs`` shows up inside documents as ``sys.inputs``; ``features``
    lists opt-in compiler features.
    """

    model_config = ConfigDict(frozen=True)

    inputs: Mapping[str, str] = Field(default_factory=dict)
    features: tuple[str, ...] = ()


class CompilerWorld:
    """Long-lived resource provider shared by many short render sessions.

    Fonts and the library are immutable after construction. The file table
    fills lazily from package directories and is guarded by one lock; the
    download itself happens outside that lock, serialized per package by the
    :class:`PackageStore`.
    """

    def __init__(
        self,
        packages: PackageStore,
        fonts: FontCatalog | None = None,
        library: Library | None = None,
    ) -> None:
        self._packages = packages
        self._fonts = fonts or FontCatalog()
        self._library = library or Library()
        self._files: dict[FileId, VirtualFile] = {}
        self._files_lock = threading.Lock()

    @property
    def library(self) -> Library:
        return self._library

    @property
    def fonts(self) -> FontCatalog:
        return self._fonts

    @property
    def package_root(self) -> Path:
        return self._packages.root

    def font(self, index: int) -> FontFace | None:
        return self._fonts.font(index)

    def session(self, source: str, now: datetime | None = None) -> RenderSession:
        """Wrap one inline document for a single compile."""
        from typmark.world.session import RenderSession

        return RenderSession(self, source, now=now)

    def ensure_package(self, spec: PackageSpec) -> Path:
        return self._packages.ensure_package(spec)

    def resolve_file(self, file_id: FileId) -> VirtualFile:
        with self._files_lock:
            cached = self._files.get(file_id)
        if cached is not None:
            return cached

        if file_id.package is None:
            raise NotFoundError(f"File not found: {file_id}", path=str(file_id))

        package_dir = self._packages.ensure_package(file_id.package)
        path = file_id.resolve(package_dir)
        if path is None:
            raise NotFoundError(
                f"Path {file_id.path} escapes package {file_id.package}", path=str(file_id)
            )

        try:
            data = path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise NotFoundError(f"File not found: {file_id}", path=str(file_id)) from e
        except OSError as e:
            raise FileAccessError(f"Cannot read {file_id}: {e}", path=str(file_id)) from e

        with self._files_lock:
            # First reader wins; a racing thread read the same bytes.
            return self._files.setdefault(file_id, VirtualFile(data))

    def source(self, file_id: FileId) -> str:
        return self.resolve_file(file_id).source(file_id)

    def file(self, file_id: FileId) -> bytes:
        return self.resolve_file(file_id).data

    def cached_files(self) -> list[FileId]:
        with self._files_lock:
            return list(self._files)
