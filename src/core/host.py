"""Extension host.

Ties the loader and the resolution engine together for a set of extensions.
Failures stay inside the extension that caused them: a faulting population
callback only removes that extension's actions from the current popup.
"""

from __future__ import annotations

import inspect
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from core.config import EngineConfig
from core.declarations import build_extension
from core.engine import resolve_actions
from core.errors import ActionError, EvaluationError, HostError
from core.loader import ModuleLoader
from core.models import ClassifiedInput, Context, ExtensionDeclaration, Modifiers, ResolvedAction
from core.options import OptionValues, build_option_values
from core.session import Session, session_scope

LOGGER = logging.getLogger(__name__)


@dataclass
class LoadedExtension:
    declaration: ExtensionDeclaration
    identity: Optional[str] = None
    stored_options: Dict[str, Any] = field(default_factory=dict)

    @property
    def identifier(self) -> str:
        return self.declaration.identifier


class ExtensionHost:
    """Owns the loaded extensions of one host process."""

    def __init__(self, loader: ModuleLoader, config: Optional[EngineConfig] = None) -> None:
        self._loader = loader
        self._config = config or EngineConfig()
        self._extensions: List[LoadedExtension] = []

    @property
    def extensions(self) -> List[LoadedExtension]:
        return list(self._extensions)

    def load_extension(
        self,
        package_root: str,
        stored_options: Optional[Mapping[str, Any]] = None,
    ) -> ExtensionDeclaration:
        """Evaluate an extension package's entry module and register it."""

        resolver = self._loader.resolver_for(package_root)
        identity = resolver.resolve(f"./{self._config.entry_module}")
        value = self._loader.load(identity, resolver)
        try:
            declaration = build_extension(value, os.path.basename(os.path.normpath(package_root)))
        except (TypeError, ValueError) as exc:
            raise EvaluationError(identity, str(exc)) from exc

        self._extensions.append(
            LoadedExtension(declaration=declaration, identity=identity, stored_options=dict(stored_options or {}))
        )
        LOGGER.info("Loaded extension %s from %s", declaration.identifier, identity)
        return declaration

    def add_extension(
        self,
        declaration: ExtensionDeclaration,
        stored_options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Register an extension declared directly in Python."""

        self._extensions.append(LoadedExtension(declaration=declaration, stored_options=dict(stored_options or {})))

    def _find(self, extension_id: str) -> LoadedExtension:
        for extension in self._extensions:
            if extension.identifier == extension_id:
                return extension
        raise KeyError(f"Unknown extension: {extension_id}")

    def option_values(self, extension_id: str) -> OptionValues:
        extension = self._find(extension_id)
        return build_option_values(extension.declaration.options, extension.stored_options)

    def resolve(self, selection: ClassifiedInput, context: Context) -> List[ResolvedAction]:
        """Resolve every extension in load order and concatenate the results."""

        resolved: List[ResolvedAction] = []
        for extension in self._extensions:
            options = self.option_values(extension.identifier)
            try:
                actions = resolve_actions(extension.declaration, selection, context, options, self._config)
            except HostError:
                LOGGER.exception("No actions from %s this time", extension.identifier)
                continue
            resolved.extend(actions)
        return resolved

    async def invoke(
        self,
        action: ResolvedAction,
        selection: ClassifiedInput,
        context: Context,
        modifiers: Optional[Modifiers] = None,
    ) -> Optional[str]:
        """Run a resolved action's code and return its text result, if any."""

        code = action.declaration.code
        if code is None:
            raise ActionError(action.identifier, "action has no code")

        options = self.option_values(action.extension_id)
        action_input = selection.with_match(action.match)
        session = Session(
            input=action_input,
            context=context,
            options=options,
            modifiers=modifiers or Modifiers(),
        )
        try:
            with session_scope(session):
                result = code(action_input, options, context)
                if inspect.isawaitable(result):
                    result = await result
        except (Exception, SystemExit) as exc:
            LOGGER.exception("Action %s failed", action.identifier)
            raise ActionError(action.identifier, str(exc) or type(exc).__name__) from exc

        LOGGER.info("Action %s completed", action.identifier)
        return None if result is None else str(result)
