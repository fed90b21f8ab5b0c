"""Fenced code block info-string parsing.

An info string is a comma-separated list: a bare word names the language,
``key=value`` pairs and flags configure the block::

    pikchr, name=flow, hl_lines=1-3 7, include=diagrams/flow.pikchr
"""

from __future__ import annotations

import html
import logging
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

LineRange = tuple[int, int]


class FenceSettings(BaseModel):
    language: str | None = None
    line_numbers: bool = False
    line_number_start: int = 1
    highlight_lines: list[LineRange] = Field(default_factory=list)
    hide_lines: list[LineRange] = Field(default_factory=list)
    name: str | None = None
    enable_copy: bool = False
    include: str | None = None

    @classmethod
    def parse(cls, info: str) -> FenceSettings:
        settings = cls()
        for token in info.split(","):
            token = token.strip()
            key, sep, value = token.partition("=")
            key = key.strip()
            if not key:
                continue
            if key == "linenostart":
                if value.strip().isdigit():
                    settings.line_number_start = int(value)
            elif key == "linenos":
                settings.line_numbers = True
            elif key == "hl_lines":
                settings.highlight_lines.extend(parse_ranges(value))
            elif key == "hide_lines":
                settings.hide_lines.extend(parse_ranges(value))
            elif key == "name":
                if sep:
                    settings.name = value
            elif key == "copy":
                settings.enable_copy = True
            elif key == "include":
                if sep:
                    settings.include = value
            elif sep:
                logger.warning("Unknown fence annotation %s", key)
            else:
                settings.language = key
        return settings

    @property
    def has_annotations(self) -> bool:
        """True when anything beyond the language affects how the block renders."""
        return bool(
            self.line_numbers
            or self.line_number_start != 1
            or self.highlight_lines
            or self.hide_lines
            or self.name
            or self.enable_copy
        )

    def hides(self, line: int) -> bool:
        return _in_ranges(line, self.hide_lines)

    def highlights(self, line: int) -> bool:
        return _in_ranges(line, self.highlight_lines)

    def visible_source(self, source: str) -> str:
        """``source`` without its hidden lines. Line positions are 1-based."""
        if not self.hide_lines:
            return source
        lines = source.splitlines(keepends=True)
        return "".join(line for n, line in enumerate(lines, start=1) if not self.hides(n))

    def wrapper_attrs(self) -> str:
        """``name`` and ``copy`` as attributes for the element wrapping the block."""
        attrs = ""
        if self.name:
            attrs += f' data-name="{html.escape(self.name)}"'
        if self.enable_copy:
            attrs += " data-copy"
        return attrs

    def include_source(self, base: Path | None) -> str | None:
        """Contents of the ``include=`` file relative to ``base``, if readable."""
        if base is None or self.include is None:
            return None
        path = base / self.include
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot include %s: %s", path, e)
            return None


def parse_range(text: str) -> LineRange | None:
    """``"3"`` → (3, 3); ``"7-2"`` → (2, 7); anything else → None."""
    start, dash, end = text.partition("-")
    if not dash:
        return (int(start), int(start)) if start.isdigit() else None
    if not (start.isdigit() and end.isdigit()):
        return None
    low, high = sorted((int(start), int(end)))
    return (low, high)


def parse_ranges(text: str) -> list[LineRange]:
    return [r for part in text.split(" ") if (r := parse_range(part)) is not None]


def _in_ranges(line: int, ranges: list[LineRange]) -> bool:
    return any(low <= line <= high for low, high in ranges)
