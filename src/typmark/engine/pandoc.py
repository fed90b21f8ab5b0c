"""MathML engine driving ``pandoc``'s typst reader."""

from __future__ import annotations

import logging
import re
import subprocess

from typmark.errors.exceptions import CompileError, EngineError

logger = logging.getLogger(__name__)

_MATH_RE = re.compile(r"<math\b.*?</math>", re.DOTALL)


class PandocMathMLEngine:
    """Convert typst equations to MathML, one process per equation."""

    def __init__(self, binary: str = "pandoc") -> None:
        self._binary = binary

    def convert(self, source: str) -> str:
        command = [self._binary, "--from=typst", "--to=html5", "--mathml"]
        logger.debug("Running %s", " ".join(command))
        try:
            completed = subprocess.run(
                command, input=source, capture_output=True, text=True, check=False
            )
        except OSError as e:
            raise EngineError(f"Cannot run {self._binary}: {e}", command=command) from e

        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout).strip()
            raise CompileError(f"Failed to convert to MathML: {detail}")
        match = _MATH_RE.search(completed.stdout)
        if match is None:
            raise CompileError(f"No MathML produced for {source!r}")
        return match.group(0)
