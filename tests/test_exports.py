from __future__ import annotations

import pytest

from core.exports import (
    ContainerExport,
    DefaultPropertyExport,
    FactoryExport,
    ModuleScope,
    RawContainer,
    select_export,
)


def _scope(modules: dict | None = None) -> ModuleScope:
    modules = modules or {}
    return ModuleScope("/ext/mod.js", lambda reference: modules[reference])


def test_untouched_container_is_the_export() -> None:
    scope = _scope()
    scope.exports.greet = "hi"

    result = select_export(scope)

    assert isinstance(result, RawContainer)
    assert result.value is scope.exports
    assert result.value.greet == "hi"


def test_default_property_is_preferred_over_container() -> None:
    scope = _scope()
    scope.exports.helper = "ignored"
    scope.exports.default = {"primary": True}

    assert select_export(scope) == DefaultPropertyExport({"primary": True})


def test_replaced_container_is_preferred_over_default_property() -> None:
    scope = _scope()
    scope.exports.default = "old"
    scope.module.exports = ["replacement"]

    assert select_export(scope) == ContainerExport(["replacement"])


def test_define_with_plain_object() -> None:
    scope = _scope()
    scope.define({"answer": 42})

    assert select_export(scope) == FactoryExport({"answer": 42})


def test_define_forms_resolve_to_one_object() -> None:
    modules = {"./dep": "dependency"}

    named = _scope(modules)
    named.define("my-module", lambda: {"kind": "named"})
    assert select_export(named).value == {"kind": "named"}

    with_deps = _scope(modules)
    with_deps.define(["./dep"], lambda dep: {"dep": dep})
    assert select_export(with_deps).value == {"dep": "dependency"}

    full = _scope(modules)
    full.define("my-module", ["./dep", "module"], lambda dep, module: {"dep": dep, "module": module})
    value = select_export(full).value
    assert value["dep"] == "dependency"
    assert value["module"] is full.module


def test_only_last_registration_takes_effect() -> None:
    scope = _scope()
    scope.define({"first": True})
    scope.define(lambda: {"second": True})

    assert select_export(scope).value == {"second": True}


def test_factory_returning_none_exports_module_exports() -> None:
    scope = _scope()

    def factory(exports):
        exports.value = 7

    scope.define(["exports"], factory)

    result = select_export(scope)
    assert isinstance(result, FactoryExport)
    assert result.value.value == 7


def test_define_extension_registers_the_extension() -> None:
    scope = _scope()
    extension = {"name": "Demo"}
    scope.define_extension(extension)

    assert select_export(scope).value is extension


def test_define_rejects_bad_arguments() -> None:
    scope = _scope()

    with pytest.raises(TypeError):
        scope.define()
    with pytest.raises(TypeError):
        scope.define(3, lambda: {})
    with pytest.raises(TypeError):
        scope.define("id", {"not": "callable"})
    assert not scope.registered


def test_bindings_expose_scope_members() -> None:
    scope = _scope()
    bindings = scope.bindings()

    assert set(bindings) == {"define", "define_extension", "module", "exports", "require"}
    assert bindings["exports"] is scope.exports
