"""Single-compile view over a :class:`CompilerWorld`."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone
from typing import TYPE_CHECKING

from typmark.world.files import MAIN_FILE, FileId

if TYPE_CHECKING:
    from typmark.world.compiler_world import CompilerWorld, Library
    from typmark.world.fonts import FontCatalog, FontFace


class RenderSession:
    """Owns one document body and the time it was created.

    The main file is answered from the session itself and never enters the
    world's shared file table; every other query goes to the world.
    """

    def __init__(
        self,
        world: CompilerWorld,
        source: str,
        now: datetime | None = None,
    ) -> None:
        self._world = world
        self._source = source
        self._now = now or _local_now()

    @property
    def world(self) -> CompilerWorld:
        return self._world

    @property
    def main(self) -> FileId:
        return MAIN_FILE

    @property
    def main_source(self) -> str:
        return self._source

    @property
    def timestamp(self) -> datetime:
        return self._now

    @property
    def library(self) -> Library:
        return self._world.library

    @property
    def fonts(self) -> FontCatalog:
        return self._world.fonts

    def source(self, file_id: FileId) -> str:
        if file_id == MAIN_FILE:
            return self._source
        return self._world.source(file_id)

    def file(self, file_id: FileId) -> bytes:
        return self._world.file(file_id)

    def font(self, index: int) -> FontFace | None:
        return self._world.font(index)

    def today(self, offset: int | None = None) -> date:
        """Current date, in the captured local zone or at a UTC ``offset`` in hours."""
        if offset is None:
            return self._now.date()
        return self._now.astimezone(timezone(timedelta(hours=offset))).date()


def _local_now() -> datetime:
    try:
        return datetime.now().astimezone()
    except (OSError, OverflowError, ValueError):
        return datetime.now(UTC)
