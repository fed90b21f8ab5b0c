"""Pydantic model for the resolved render configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from typmark.config.hierarchy import load_config_hierarchy
from typmark.types import MathFormat

_PACKAGES_SUBDIR = "packages"


class RenderSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cache_dir: Path = Path(".cache")
    cache_disabled: bool = False
    dark_mode: bool = False
    minify: bool = False
    math_format: MathFormat = MathFormat.SVG
    fail_on_error: bool = True
    light_styles: Path | None = None
    dark_styles: Path | None = None
    font_dirs: list[Path] = Field(default_factory=list)
    system_fonts: bool = False
    typst_binary: str = "typst"
    pikchr_binary: str = "pikchr"
    pandoc_binary: str = "pandoc"
    registry_url: str = "https://packages.typst.org"
    max_workers: int = Field(default=4, ge=1)
    log_level: str = "WARNING"

    @classmethod
    def resolve(cls, **runtime_overrides: Any) -> RenderSettings:
        """Merge every config layer and validate the result."""
        return cls.model_validate(load_config_hierarchy(**runtime_overrides))

    @property
    def package_dir(self) -> Path:
        """Downloaded packages live next to the cache files."""
        return self.cache_dir / _PACKAGES_SUBDIR

    def read_styles(self) -> tuple[str | None, str | None]:
        """Custom (light, dark) stylesheets, None where the default applies."""
        return _read_optional(self.light_styles), _read_optional(self.dark_styles)


def _read_optional(path: Path | None) -> str | None:
    if path is None:
        return None
    if not path.exists():
        raise FileNotFoundError(f"Stylesheet not found: {path}")
    return path.read_text(encoding="utf-8")
