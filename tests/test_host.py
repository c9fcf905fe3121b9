from __future__ import annotations

import asyncio
import textwrap
from typing import Optional

import pytest

from adapters.python_runtime import PythonScriptRuntime
from core.declarations import build_extension
from core.errors import ActionError, EvaluationError
from core.host import ExtensionHost
from core.loader import ModuleCache, ModuleLoader
from core.models import ClassifiedInput, Context, Modifiers
from core.session import current_session


class FakeFileSystem:
    def __init__(self, files: dict[str, str]) -> None:
        self.files = {path: textwrap.dedent(source) for path, source in files.items()}

    def exists(self, path: str) -> bool:
        return path in self.files

    def read(self, path: str) -> Optional[bytes]:
        source = self.files.get(path)
        return None if source is None else source.encode("utf-8")


def _host(files: Optional[dict[str, str]] = None) -> ExtensionHost:
    loader = ModuleLoader(FakeFileSystem(files or {}), PythonScriptRuntime(), cache=ModuleCache())
    return ExtensionHost(loader)


def test_failing_population_only_silences_its_extension() -> None:
    def broken(selection, options, context):
        raise ValueError("cannot populate")

    host = _host()
    host.add_extension(build_extension({"identifier": "broken", "actions": broken}, "broken"))
    host.add_extension(build_extension({"identifier": "steady", "actions": [{"identifier": "copy"}]}, "steady"))

    resolved = host.resolve(ClassifiedInput(text="hello"), Context())

    assert [(action.extension_id, action.identifier) for action in resolved] == [("steady", "copy")]


def test_population_calling_exit_only_silences_its_extension() -> None:
    def quits(selection, options, context):
        raise SystemExit(0)

    host = _host()
    host.add_extension(build_extension({"identifier": "quits", "actions": quits}, "quits"))
    host.add_extension(build_extension({"identifier": "steady", "actions": [{"identifier": "copy"}]}, "steady"))

    resolved = host.resolve(ClassifiedInput(text="hello"), Context())

    assert [action.extension_id for action in resolved] == ["steady"]


def test_invoke_passes_matched_text_and_awaits_coroutines() -> None:
    async def reverse(selection, options, context):
        await asyncio.sleep(0)
        return selection.matched_text[::-1] + options["suffix"]

    host = _host()
    host.add_extension(
        build_extension(
            {
                "identifier": "rev",
                "options": [{"identifier": "suffix", "type": "string", "defaultValue": "!"}],
                "actions": [{"identifier": "reverse", "regex": r"\d+", "code": reverse}],
            },
            "rev",
        ),
        stored_options={"suffix": "?"},
    )
    selection = ClassifiedInput(text="order 123")

    (action,) = host.resolve(selection, Context())
    result = asyncio.run(host.invoke(action, selection, Context()))

    assert result == "321?"


def test_invoke_exposes_modifiers_through_session() -> None:
    def report(selection, options, context):
        return "shift" if current_session().modifiers.shift else "plain"

    host = _host()
    host.add_extension(build_extension({"identifier": "mods", "action": report}, "mods"))
    selection = ClassifiedInput(text="x")
    (action,) = host.resolve(selection, Context())

    assert asyncio.run(host.invoke(action, selection, Context(), Modifiers(shift=True))) == "shift"
    assert asyncio.run(host.invoke(action, selection, Context())) == "plain"


def test_invoke_rejects_disabled_and_wraps_faults() -> None:
    def explode(selection, options, context):
        raise RuntimeError("kaboom")

    host = _host()
    host.add_extension(
        build_extension({"identifier": "x", "actions": [{"identifier": "label"}, explode]}, "x")
    )
    selection = ClassifiedInput(text="x")
    label, boom = host.resolve(selection, Context())

    with pytest.raises(ActionError):
        asyncio.run(host.invoke(label, selection, Context()))
    with pytest.raises(ActionError) as excinfo:
        asyncio.run(host.invoke(boom, selection, Context()))
    assert excinfo.value.action_id == "explode"
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_invoke_turns_exit_into_action_error() -> None:
    def leave(selection, options, context):
        raise SystemExit(2)

    host = _host()
    host.add_extension(build_extension({"identifier": "x", "actions": [leave]}, "x"))
    selection = ClassifiedInput(text="x")
    (action,) = host.resolve(selection, Context())

    with pytest.raises(ActionError) as excinfo:
        asyncio.run(host.invoke(action, selection, Context()))
    assert isinstance(excinfo.value.__cause__, SystemExit)


def test_load_extension_evaluates_python_modules() -> None:
    files = {
        "/ext/Config.js": """
            helper = require("./helper")
            settings = require("./settings")

            define_extension({
                "identifier": "demo",
                "name": settings["name"],
                "actions": [
                    {"identifier": "shout", "code": lambda selection, options, context: helper.shout(selection.text)},
                ],
            })
        """,
        "/ext/helper.js": """
            def shout(text):
                return text.upper()

            exports.shout = shout
        """,
        "/ext/settings.json": '{"name": "Demo"}',
    }
    host = _host(files)

    declaration = host.load_extension("/ext")
    selection = ClassifiedInput(text="hey")
    (action,) = host.resolve(selection, Context())

    assert declaration.name == "Demo"
    assert action.title == "Demo"
    assert asyncio.run(host.invoke(action, selection, Context())) == "HEY"


def test_load_extension_rejects_module_without_extension() -> None:
    host = _host({"/ext/Config.js": "module.exports = None\n"})

    with pytest.raises(EvaluationError):
        host.load_extension("/ext")
    assert host.extensions == []
