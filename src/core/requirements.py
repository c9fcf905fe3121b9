"""Requirement-token evaluation (core domain).

A requirement is a short token such as ``"paste"`` or ``"option-mode=fast"``;
a leading ``!`` inverts it. All tokens of a list must hold.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Mapping

from core.errors import NotSignedInError
from core.models import EMAILS, OTHER_URLS, PATHS, WEB_URLS, ClassifiedInput, Context

LOGGER = logging.getLogger(__name__)

NEGATION = "!"
OPTION_PREFIX = "option-"

_Check = Callable[[ClassifiedInput, Context], bool]

_CHECKS: Dict[str, _Check] = {
    "text": lambda selection, context: bool(selection.text),
    "copy": lambda selection, context: context.can_copy,
    "cut": lambda selection, context: context.can_cut,
    "paste": lambda selection, context: context.can_paste,
    "formatting": lambda selection, context: context.has_formatting,
    "url": lambda selection, context: bool(selection.items(WEB_URLS) or selection.items(OTHER_URLS)),
    "urls": lambda selection, context: bool(selection.items(WEB_URLS) or selection.items(OTHER_URLS)),
    "email": lambda selection, context: bool(selection.items(EMAILS)),
    "emails": lambda selection, context: bool(selection.items(EMAILS)),
    "path": lambda selection, context: bool(selection.items(PATHS)),
}


def _option_as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _option_holds(clause: str, options: Mapping[str, Any]) -> bool:
    name, sep, expected = clause.partition("=")
    if not sep or not name:
        LOGGER.warning("Malformed option requirement: %s%s", OPTION_PREFIX, clause)
        return False
    try:
        value = options[name]
    except (KeyError, NotSignedInError):
        return False
    return _option_as_text(value) == expected


def requirement_holds(
    token: str,
    selection: ClassifiedInput,
    context: Context,
    options: Mapping[str, Any],
) -> bool:
    """Evaluate a single (possibly negated) requirement token."""

    negated = token.startswith(NEGATION)
    name = token[len(NEGATION):] if negated else token

    if name.startswith(OPTION_PREFIX):
        result = _option_holds(name[len(OPTION_PREFIX):], options)
    else:
        check = _CHECKS.get(name)
        if check is None:
            LOGGER.warning("Unknown requirement token: %s", name)
            result = False
        else:
            result = check(selection, context)

    return not result if negated else result


def requirements_hold(
    tokens: Iterable[str],
    selection: ClassifiedInput,
    context: Context,
    options: Mapping[str, Any],
) -> bool:
    """Return True when every token holds; an empty list always passes."""

    return all(requirement_holds(token, selection, context, options) for token in tokens)
