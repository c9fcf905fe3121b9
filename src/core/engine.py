"""Action resolution (core domain).

Decides which of an extension's actions are offered for one selection. Static
action lists are filtered action by action; a population callback computes the
list itself and bypasses every static filter.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple

from core.config import EngineConfig
from core.declarations import build_actions
from core.errors import PatternError, PopulationError
from core.models import (
    ActionDeclaration,
    ClassifiedInput,
    Context,
    ExtensionDeclaration,
    MatchResult,
    Modifiers,
    PopulatedActions,
    ResolvedAction,
)
from core.patterns import TextPattern
from core.requirements import requirements_hold
from core.session import Session, session_scope

LOGGER = logging.getLogger(__name__)

_NO_MATCH = object()


def _app_allowed(
    app_identifier: str,
    required_apps: Optional[Tuple[str, ...]],
    excluded_apps: Optional[Tuple[str, ...]],
) -> bool:
    if excluded_apps is not None and app_identifier in excluded_apps:
        return False
    if required_apps is not None and app_identifier not in required_apps:
        return False
    return True


def _match(pattern: TextPattern, text: str, action: ActionDeclaration) -> Any:
    """Return the match, None for no pattern hit, or _NO_MATCH on a broken pattern."""

    try:
        return pattern.match(text)
    except PatternError as exc:
        exc.action_id = action.identifier
        LOGGER.warning("Action %s skipped: %s", action.identifier, exc)
        return _NO_MATCH


def _filter_action(
    action: ActionDeclaration,
    extension: ExtensionDeclaration,
    selection: ClassifiedInput,
    context: Context,
    options: Mapping[str, Any],
    config: EngineConfig,
) -> Optional[ResolvedAction]:
    required_apps = action.required_apps if action.required_apps is not None else extension.required_apps
    excluded_apps = action.excluded_apps if action.excluded_apps is not None else extension.excluded_apps
    if not _app_allowed(context.app_identifier, required_apps, excluded_apps):
        return None

    requirements = action.requirements
    if requirements is None:
        requirements = extension.requirements
    if requirements is None:
        requirements = config.default_requirements
    if not requirements_hold(requirements, selection, context, options):
        return None

    pattern = action.pattern or extension.pattern
    match: Optional[MatchResult] = None
    if pattern is not None:
        found = _match(pattern, selection.text, action)
        if found is None or found is _NO_MATCH:
            return None
        match = found

    return ResolvedAction(
        extension_id=extension.identifier,
        declaration=action,
        matched_text=match.full if match is not None else selection.text,
        match=match,
        extension_name=extension.name,
        extension_icon=extension.icon,
    )


def _populate(
    source: PopulatedActions,
    extension: ExtensionDeclaration,
    selection: ClassifiedInput,
    context: Context,
    options: Mapping[str, Any],
) -> List[ResolvedAction]:
    # No key event exists yet, so every modifier reads as released.
    session = Session(input=selection, context=context, options=options, modifiers=Modifiers())
    try:
        with session_scope(session):
            produced = source.callback(selection, options, context)
        actions = build_actions(produced)
    except (Exception, SystemExit) as exc:
        raise PopulationError(extension.identifier, str(exc) or type(exc).__name__) from exc

    return [
        ResolvedAction(
            extension_id=extension.identifier,
            declaration=action,
            matched_text=selection.text,
            extension_name=extension.name,
            extension_icon=extension.icon,
        )
        for action in actions
    ]


def resolve_actions(
    extension: ExtensionDeclaration,
    selection: ClassifiedInput,
    context: Context,
    options: Mapping[str, Any],
    config: Optional[EngineConfig] = None,
) -> List[ResolvedAction]:
    """Return the actions to offer, in declaration (or callback) order.

    Raises PopulationError when the extension's population callback faults.
    """

    config = config or EngineConfig()
    source = extension.source
    if isinstance(source, PopulatedActions):
        return _populate(source, extension, selection, context, options)

    resolved: List[ResolvedAction] = []
    for action in source.actions:
        item = _filter_action(action, extension, selection, context, options, config)
        if item is not None:
            resolved.append(item)
    return resolved
