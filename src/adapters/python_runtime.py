"""Script runtime adapter that evaluates module source as Python.

Each evaluation gets a fresh namespace holding only the module scope bindings
(``define``, ``define_extension``, ``module``, ``exports``, ``require``) on top
of the builtins.
"""

from __future__ import annotations

import builtins
import os

from core.exports import ModuleScope


def _module_name(identity: str) -> str:
    stem = os.path.splitext(os.path.basename(identity))[0]
    return f"clipdeck_module_{stem}"


class PythonScriptRuntime:
    """Runs module source with ``compile`` + ``exec`` in an isolated namespace."""

    def run(self, source: str, scope: ModuleScope) -> None:
        code = compile(source, scope.identity, "exec")
        namespace = {
            "__name__": _module_name(scope.identity),
            "__file__": scope.identity,
            "__builtins__": builtins,
        }
        namespace.update(scope.bindings())
        exec(code, namespace)
