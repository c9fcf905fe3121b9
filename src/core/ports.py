"""Ports (interfaces) used by the module loader.

Ports define the minimal host capabilities the core relies on so the loader
can be reused with a different file store, transpiler, or script runtime.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from core.exports import ModuleScope


class FileSystemPort(Protocol):
    """Read-only view of the extension package and module repository."""

    def exists(self, path: str) -> bool:
        ...

    def read(self, path: str) -> Optional[bytes]:
        """Return the file contents, or ``None`` when the file does not exist."""
        ...


class TranspilerPort(Protocol):
    """Synchronous source-to-source transpiler for the typed dialect."""

    def transpile(self, source: str, identity: str) -> str:
        ...


class ScriptRuntimePort(Protocol):
    """Evaluates module source with the bindings of a module scope."""

    def run(self, source: str, scope: "ModuleScope") -> None:
        ...
