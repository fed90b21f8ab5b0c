"""Font catalog built once from a set of font directories."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from fontTools.ttLib import TTCollection, TTFont, TTLibError
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

FONT_SUFFIXES = frozenset({".ttf", ".otf", ".ttc", ".otc"})
_COLLECTION_TAG = b"ttcf"


class FontFace(BaseModel):
    """One face: the file holding it plus its index inside that file."""

    model_config = ConfigDict(frozen=True)

    path: Path
    index: int = 0
    family: str = ""
    style: str = ""

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


class FontCatalog:
    """Read-only list of faces, shared by every compile without locking."""

    def __init__(self, faces: Iterable[FontFace] = ()) -> None:
        self._faces: tuple[FontFace, ...] = tuple(faces)

    @classmethod
    def from_directories(cls, directories: Iterable[str | Path]) -> FontCatalog:
        faces: list[FontFace] = []
        for directory in directories:
            directory = Path(directory)
            if not directory.is_dir():
                logger.warning("Font directory %s does not exist, skipping", directory)
                continue
            for path in sorted(directory.rglob("*")):
                if path.suffix.lower() in FONT_SUFFIXES and path.is_file():
                    faces.extend(_load_faces(path))
        logger.debug("Font catalog holds %d faces", len(faces))
        return cls(faces)

    @property
    def directories(self) -> list[Path]:
        """Distinct directories holding at least one face, in catalog order."""
        seen: dict[Path, None] = {}
        for face in self._faces:
            seen.setdefault(face.path.parent, None)
        return list(seen)

    def font(self, index: int) -> FontFace | None:
        if 0 <= index < len(self._faces):
            return self._faces[index]
        return None

    def families(self) -> list[str]:
        return sorted({face.family for face in self._faces if face.family})

    def __len__(self) -> int:
        return len(self._faces)

    def __iter__(self):
        return iter(self._faces)


def _load_faces(path: Path) -> list[FontFace]:
    try:
        with open(path, "rb") as f:
            is_collection = f.read(4) == _COLLECTION_TAG
        container = TTCollection(path, lazy=True) if is_collection else TTFont(path, lazy=True)
        try:
            fonts = list(container.fonts) if is_collection else [container]
            return [
                FontFace(path=path, index=i, family=_family(font), style=_style(font))
                for i, font in enumerate(fonts)
            ]
        finally:
            container.close()
    except (TTLibError, OSError, KeyError) as e:
        logger.warning("Skipping unreadable font %s: %s", path, e)
        return []


def _family(font: TTFont) -> str:
    return font["name"].getBestFamilyName() or ""


def _style(font: TTFont) -> str:
    return font["name"].getBestSubFamilyName() or ""
