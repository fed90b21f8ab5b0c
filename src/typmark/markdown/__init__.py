"""Markdown integration — fence annotations and document-level rendering."""

from typmark.markdown.codeblock import render_code_block
from typmark.markdown.document import (
    DocumentRenderer,
    Fragment,
    FragmentKind,
    build_parser,
    find_fragments,
)
from typmark.markdown.fence import FenceSettings

__all__ = [
    "DocumentRenderer",
    "FenceSettings",
    "Fragment",
    "FragmentKind",
    "build_parser",
    "find_fragments",
    "render_code_block",
]
