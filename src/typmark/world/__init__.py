"""Compiler world — virtual files, fonts and packages for typeset compiles."""

from typmark.world.compiler_world import CompilerWorld, Library
from typmark.world.files import MAIN_FILE, FileId, PackageSpec, VirtualFile
from typmark.world.fonts import FontCatalog, FontFace
from typmark.world.packages import DEFAULT_REGISTRY_URL, PackageStore
from typmark.world.session import RenderSession

__all__ = [
    "CompilerWorld",
    "DEFAULT_REGISTRY_URL",
    "FileId",
    "FontCatalog",
    "FontFace",
    "Library",
    "MAIN_FILE",
    "PackageSpec",
    "PackageStore",
    "RenderSession",
    "VirtualFile",
]
