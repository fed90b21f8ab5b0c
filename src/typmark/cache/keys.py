"""Cache key generation — content-addressed, seeded xxHash64.

Keys are 64-bit and non-cryptographic. Two different requests that collide
are served the same cached output; render inputs are not adversarial, so a
key match is taken to mean a request match.
"""

from __future__ import annotations

import xxhash

from typmark.types import RenderMode

KEY_SEED = 42

_SEPARATOR = b"\x1f"


def math_key(document_source: str, mode: RenderMode, minify: bool) -> str:
    """Key for a typeset render.

    ``document_source`` is the templated compiler input, so the preamble,
    font size and marker code all take part in the key.
    """
    return _digest(document_source, mode.value, "1" if minify else "0")


def diagram_key(source: str, dark_mode: bool) -> str:
    """Key for one themed diagram render."""
    return _digest(source, "dark" if dark_mode else "light")


def _digest(*parts: str) -> str:
    hasher = xxhash.xxh64(seed=KEY_SEED)
    for part in parts:
        hasher.update(part.encode("utf-8"))
        hasher.update(_SEPARATOR)
    return hasher.hexdigest()
