"""Extension declaration building (core domain).

Turns the object exported by an extension's entry module into frozen
declarations, so per-invocation resolution never has to guess about missing
fields, key spellings, or pattern types.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple

from core.models import (
    ActionDeclaration,
    ActionSource,
    ExtensionDeclaration,
    OptionDefinition,
    PopulatedActions,
    StaticActions,
)
from core.patterns import build_pattern

_MISSING = object()

DEFAULT_LOCALE = "en"


def _field(entry: Any, *names: str) -> Any:
    """Return the first present field among names, accepting mappings or objects."""

    for name in names:
        if isinstance(entry, Mapping):
            if name in entry:
                return entry[name]
        elif hasattr(entry, name):
            return getattr(entry, name)
    return _MISSING


def _get(entry: Any, *names: str, default: Any = None) -> Any:
    value = _field(entry, *names)
    return default if value is _MISSING else value


def _localized(value: Any) -> Optional[str]:
    # Only pre-resolved strings are needed; tables fall back to English.
    if value is None:
        return None
    if isinstance(value, Mapping):
        text = value.get(DEFAULT_LOCALE)
        if text is None and value:
            text = next(iter(value.values()))
        return None if text is None else str(text)
    return str(value)


def _tokens(value: Any) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)


def build_action(entry: Any, position: int = 0) -> ActionDeclaration:
    """Normalize one action entry: a mapping, an object, or a bare callable."""

    if isinstance(entry, ActionDeclaration):
        return entry

    if callable(entry) and not isinstance(entry, Mapping):
        name = getattr(entry, "__name__", None)
        if not name or name == "<lambda>":
            name = f"action-{position + 1}"
        return ActionDeclaration(identifier=name, code=entry)

    code = _get(entry, "code")
    if code is not None and not callable(code):
        raise TypeError(f"Action code must be callable, got {type(code).__name__}")

    raw_icon = _field(entry, "icon")
    return ActionDeclaration(
        identifier=str(_get(entry, "identifier", default=None) or f"action-{position + 1}"),
        title=_localized(_get(entry, "title")),
        icon=None if raw_icon is _MISSING else raw_icon,
        inherit_icon=raw_icon is _MISSING,
        requirements=_tokens(_get(entry, "requirements")),
        pattern=build_pattern(_get(entry, "regex", "pattern")),
        required_apps=_tokens(_get(entry, "required_apps", "requiredApps")),
        excluded_apps=_tokens(_get(entry, "excluded_apps", "excludedApps")),
        code=code,
        before=_get(entry, "before"),
        after=_get(entry, "after"),
        capture_html=bool(_get(entry, "capture_html", "captureHtml", default=False)),
        capture_rtf=bool(_get(entry, "capture_rtf", "captureRtf", default=False)),
        stay_visible=bool(_get(entry, "stay_visible", "stayVisible", default=False)),
    )


def build_actions(entries: Any) -> Tuple[ActionDeclaration, ...]:
    """Normalize whatever a population callback or a static list provides."""

    if entries is None:
        return ()
    if isinstance(entries, (list, tuple)):
        return tuple(build_action(entry, index) for index, entry in enumerate(entries))
    return (build_action(entries, 0),)


def build_option(entry: Any) -> OptionDefinition:
    identifier = _get(entry, "identifier")
    option_type = _get(entry, "type")
    if not identifier or not option_type:
        raise ValueError("Options need both an identifier and a type")
    return OptionDefinition(
        identifier=str(identifier),
        type=str(option_type),
        label=_localized(_get(entry, "label")),
        description=_localized(_get(entry, "description")),
        default_value=_get(entry, "default_value", "defaultValue"),
        values=tuple(_get(entry, "values", default=()) or ()),
        hidden=bool(_get(entry, "hidden", default=False)),
        inset=bool(_get(entry, "inset", default=False)),
    )


def _build_source(value: Any) -> ActionSource:
    actions = _field(value, "actions")
    if actions is not _MISSING and actions is not None:
        if callable(actions) and not isinstance(actions, (list, tuple)):
            return PopulatedActions(callback=actions)
        return StaticActions(actions=build_actions(actions))

    action = _field(value, "action")
    if action is not _MISSING and action is not None:
        return StaticActions(actions=(build_action(action, 0),))
    return StaticActions(actions=())


def build_extension(value: Any, fallback_identifier: str) -> ExtensionDeclaration:
    """Build the declaration of an extension from its exported object."""

    if value is None:
        raise TypeError("Extension module did not export anything")

    options: List[OptionDefinition] = [build_option(entry) for entry in _get(value, "options", default=()) or ()]
    return ExtensionDeclaration(
        identifier=str(_get(value, "identifier") or fallback_identifier),
        source=_build_source(value),
        name=_localized(_get(value, "name")),
        icon=_get(value, "icon"),
        options=tuple(options),
        requirements=_tokens(_get(value, "requirements")),
        pattern=build_pattern(_get(value, "regex", "pattern")),
        required_apps=_tokens(_get(value, "required_apps", "requiredApps")),
        excluded_apps=_tokens(_get(value, "excluded_apps", "excludedApps")),
    )
