"""Per-call invocation state.

Extension code reads the modifiers and the rest of the current invocation from
here rather than from globals, so concurrent tasks each see their own values.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional

from core.models import ClassifiedInput, Context, Modifiers


@dataclass(frozen=True)
class Session:
    input: ClassifiedInput
    context: Context
    options: Mapping[str, Any]
    modifiers: Modifiers


_CURRENT: ContextVar[Optional[Session]] = ContextVar("clipdeck_session", default=None)


def current_session() -> Session:
    """Return the session of the running population callback or action."""

    session = _CURRENT.get()
    if session is None:
        raise RuntimeError("No action session is active")
    return session


@contextmanager
def session_scope(session: Session) -> Iterator[Session]:
    token = _CURRENT.set(session)
    try:
        yield session
    finally:
        _CURRENT.reset(token)
