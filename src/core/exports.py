"""Module scope and export-convention detection (core domain).

A module can hand its value to importers in three ways:
- register it through ``define(...)`` (factory registration),
- replace ``module.exports`` with a new value,
- set ``exports.default`` on the pre-seeded container.
If it does none of these, the container itself is the export. ``select_export``
is the only place that decides between them.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Callable, Dict, Sequence, Union

DEFAULT_EXPORT = "default"

# AMD dependency names that map to the scope's own bindings.
_SCOPE_DEPENDENCIES = ("require", "exports", "module")


class ModuleHandle:
    """The ``module`` binding seen by evaluated code."""

    def __init__(self, exports: Any) -> None:
        self.exports = exports


class ModuleScope:
    """Bindings exposed to one module evaluation."""

    def __init__(self, identity: str, require: Callable[[str], Any]) -> None:
        self.identity = identity
        self.require = require
        self.exports = SimpleNamespace()
        self.module = ModuleHandle(self.exports)
        self.registered = False
        self.registration: Any = None

    def _dependency(self, name: str) -> Any:
        if name == "require":
            return self.require
        if name == "exports":
            return self.exports
        if name == "module":
            return self.module
        return self.require(name)

    def _register(self, value: Any) -> None:
        # Later registrations replace earlier ones.
        self.registered = True
        self.registration = value

    def define(self, *args: Any) -> None:
        """Register the module's value.

        Accepted forms: ``define(obj)``, ``define(factory)``,
        ``define(dependencies, factory)``, ``define(id, factory)`` and
        ``define(id, dependencies, factory)``. The factory runs immediately.
        """

        if not 1 <= len(args) <= 3:
            raise TypeError(f"define() takes 1 to 3 arguments ({len(args)} given)")

        target = args[-1]
        dependencies: Sequence[str] = ()
        if len(args) == 3:
            dependencies = args[1]
        elif len(args) == 2:
            head = args[0]
            if isinstance(head, (list, tuple)):
                dependencies = head
            elif not isinstance(head, str):
                raise TypeError("define() expects a module id or a dependency list before the factory")

        if len(args) == 1 and not callable(target):
            self._register(target)
            return
        if not callable(target):
            raise TypeError("define() factory must be callable")

        value = target(*[self._dependency(name) for name in dependencies])
        if value is None:
            value = self.module.exports
        self._register(value)

    def define_extension(self, extension: Any) -> None:
        """Register an extension object as this module's value."""

        self._register(extension)

    def bindings(self) -> Dict[str, Any]:
        return {
            "define": self.define,
            "define_extension": self.define_extension,
            "module": self.module,
            "exports": self.exports,
            "require": self.require,
        }


@dataclass(frozen=True)
class FactoryExport:
    value: Any


@dataclass(frozen=True)
class ContainerExport:
    value: Any


@dataclass(frozen=True)
class DefaultPropertyExport:
    value: Any


@dataclass(frozen=True)
class RawContainer:
    value: Any


ExportResult = Union[FactoryExport, ContainerExport, DefaultPropertyExport, RawContainer]


def select_export(scope: ModuleScope) -> ExportResult:
    """Pick the export value of an evaluated scope, by fixed precedence."""

    if scope.registered:
        return FactoryExport(scope.registration)
    if scope.module.exports is not scope.exports:
        return ContainerExport(scope.module.exports)
    if DEFAULT_EXPORT in vars(scope.exports):
        return DefaultPropertyExport(getattr(scope.exports, DEFAULT_EXPORT))
    return RawContainer(scope.exports)
