"""Error taxonomy for the extension host core.

Every error carries the file identity or action identifier the host needs to
log the failure and carry on; none of them is meant to stop the host process.
"""

from __future__ import annotations

from typing import Optional


class HostError(Exception):
    """Base class for all errors raised by the core."""


class ResolutionError(HostError):
    """A module reference could not be mapped to a file."""

    def __init__(self, reference: str, issuer: Optional[str]) -> None:
        super().__init__(f"Cannot resolve module '{reference}' (required from {issuer or '<root>'})")
        self.reference = reference
        self.issuer = issuer


class CyclicLoadError(HostError):
    """A module transitively required itself while it was still loading."""

    def __init__(self, identity: str) -> None:
        super().__init__(f"Cyclic require of module {identity}")
        self.identity = identity


class EvaluationError(HostError):
    """Transpiling, parsing, or evaluating a module failed."""

    def __init__(self, identity: str, reason: str) -> None:
        super().__init__(f"Failed to evaluate module {identity}: {reason}")
        self.identity = identity


class PopulationError(HostError):
    """An extension's population callback faulted or returned garbage."""

    def __init__(self, extension_id: str, reason: str) -> None:
        super().__init__(f"Population callback of {extension_id} failed: {reason}")
        self.extension_id = extension_id


class PatternError(HostError):
    """A pattern supplied by an action is malformed."""

    def __init__(self, pattern: str, reason: str, action_id: Optional[str] = None) -> None:
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.action_id = action_id


class ActionError(HostError):
    """An invoked action has no code or its code faulted."""

    def __init__(self, action_id: str, reason: str) -> None:
        super().__init__(f"Action {action_id} failed: {reason}")
        self.action_id = action_id


class NotSignedInError(HostError):
    """The auth secret option was read before the user signed in."""

    def __init__(self) -> None:
        super().__init__("Not signed in")
