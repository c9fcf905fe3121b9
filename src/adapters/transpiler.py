"""Subprocess transpiler adapter.

Hands typed-dialect sources to an external command (stdin in, stdout out) so
the host can plug in whatever transpiler is installed.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

LOGGER = logging.getLogger(__name__)


class SubprocessTranspiler:
    """Transpile by piping the source through a configured command."""

    def __init__(self, command: Sequence[str], timeout: float = 30.0) -> None:
        if not command:
            raise ValueError("Transpiler command must not be empty")
        self._command = list(command)
        self._timeout = timeout

    def transpile(self, source: str, identity: str) -> str:
        LOGGER.debug("Transpiling %s with %s", identity, self._command[0])
        completed = subprocess.run(
            self._command,
            input=source,
            capture_output=True,
            text=True,
            timeout=self._timeout,
            check=False,
        )
        if completed.returncode != 0:
            detail = completed.stderr.strip() or f"exit status {completed.returncode}"
            raise RuntimeError(f"Transpiler failed for {identity}: {detail}")
        return completed.stdout
