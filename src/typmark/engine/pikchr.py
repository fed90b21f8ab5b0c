"""Diagram engine driving the ``pikchr`` command-line renderer."""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path

from typmark.errors.exceptions import DiagramError, EngineError

logger = logging.getLogger(__name__)


class PikchrCliEngine:
    """Render pikchr source to SVG, one process per themed render."""

    def __init__(self, binary: str = "pikchr") -> None:
        self._binary = binary

    def render(self, source: str, dark_mode: bool = False) -> str:
        with tempfile.TemporaryDirectory(prefix="typmark-pikchr-") as tmp:
            path = Path(tmp) / "diagram.pikchr"
            path.write_text(source, encoding="utf-8")

            command = [self._binary, "--svg-only"]
            if dark_mode:
                command.append("--dark-mode")
            command.append(str(path))

            logger.debug("Running %s", " ".join(command))
            try:
                completed = subprocess.run(command, capture_output=True, text=True, check=False)
            except OSError as e:
                raise EngineError(f"Cannot run {self._binary}: {e}", command=command) from e

        svg = completed.stdout.strip()
        if completed.returncode != 0 or "<svg" not in svg:
            detail = (completed.stderr or completed.stdout).strip()
            raise DiagramError(f"Failed to render pikchr: {detail}")
        return svg
