"""Local filesystem adapter.

Implements the core FileSystemPort on top of the real disk.
"""

from __future__ import annotations

import os
from typing import Optional


class LocalFileSystem:
    """Thin disk wrapper that satisfies the FileSystemPort contract."""

    def exists(self, path: str) -> bool:
        # Directories never count as module files.
        return os.path.isfile(path)

    def read(self, path: str) -> Optional[bytes]:
        try:
            with open(path, "rb") as handle:
                return handle.read()
        except (FileNotFoundError, IsADirectoryError):
            return None
