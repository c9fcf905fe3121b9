"""Pattern capability used by the action filter.

Actions may carry either an already compiled ``re.Pattern`` or a plain pattern
string. Both are wrapped behind ``match(text)`` so the engine never cares which
one it holds. Every match starts at position 0: no search position survives
between calls, actions, or invocations.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Protocol

from core.errors import PatternError
from core.models import MatchResult


class TextPattern(Protocol):
    source: str

    def match(self, text: str) -> Optional[MatchResult]:
        ...


def _to_result(found: Optional[re.Match]) -> Optional[MatchResult]:
    if found is None:
        return None
    return MatchResult(
        full=found.group(0),
        groups=tuple(found.groups()),
        start=found.start(),
        end=found.end(),
    )


class NativePattern:
    """Pattern backed by a compiled ``re.Pattern`` object."""

    def __init__(self, compiled: re.Pattern) -> None:
        self._compiled = compiled
        self.source = compiled.pattern

    def match(self, text: str) -> Optional[MatchResult]:
        return _to_result(self._compiled.search(text, 0))

    def __repr__(self) -> str:
        return f"NativePattern({self.source!r})"


class StringPattern:
    """Pattern given as a string, compiled when first used.

    Compilation is deferred so a malformed string only fails the action that
    carries it, at match time, instead of the whole declaration.
    """

    def __init__(self, source: str, flags: int = 0) -> None:
        self.source = source
        self._flags = flags

    def match(self, text: str) -> Optional[MatchResult]:
        try:
            compiled = re.compile(self.source, self._flags)
        except re.error as exc:
            raise PatternError(self.source, str(exc)) from exc
        return _to_result(compiled.search(text, 0))

    def __repr__(self) -> str:
        return f"StringPattern({self.source!r})"


def build_pattern(value: Any) -> Optional[TextPattern]:
    """Wrap a declared pattern value, or return ``None`` when there is none.

    Only compiled ``re`` patterns and strings are accepted.
    """

    if value is None:
        return None
    if isinstance(value, (NativePattern, StringPattern)):
        return value
    if isinstance(value, re.Pattern):
        return NativePattern(value)
    if isinstance(value, str):
        return StringPattern(value)
    raise TypeError(f"Unsupported pattern type: {type(value).__name__}")
