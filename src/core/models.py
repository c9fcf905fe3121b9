"""Core domain models.

These dataclasses are shared across the core and adapters so that neither the
classifier nor the script runtime leaks its own types into the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Tuple, Union

if TYPE_CHECKING:
    from core.patterns import TextPattern

# Detected-entity categories reported by the input classifier.
WEB_URLS = "urls"
OTHER_URLS = "non_http_urls"
EMAILS = "emails"
PATHS = "paths"

ENTITY_KINDS = (WEB_URLS, OTHER_URLS, EMAILS, PATHS)


@dataclass(frozen=True)
class TextRange:
    """Location of a detected entity inside the selected text."""

    location: int
    length: int


@dataclass(frozen=True)
class DetectedItem:
    text: str
    range: TextRange


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a successful pattern match: full match plus capture groups."""

    full: str
    groups: Tuple[Optional[str], ...]
    start: int
    end: int

    def as_list(self) -> list[Optional[str]]:
        """Return ``[full, group1, group2, ...]``."""

        return [self.full, *self.groups]


@dataclass(frozen=True)
class ClassifiedInput:
    """Structured record of one selection, built once per invocation."""

    text: str
    html: Optional[str] = None
    xhtml: Optional[str] = None
    markdown: Optional[str] = None
    rtf: Optional[str] = None
    data: Mapping[str, Tuple[DetectedItem, ...]] = field(default_factory=dict)
    is_url: bool = False
    match: Optional[MatchResult] = None

    def items(self, kind: str) -> Tuple[DetectedItem, ...]:
        return tuple(self.data.get(kind, ()))

    @property
    def matched_text(self) -> str:
        """First pattern match, or the whole selection when no pattern ran."""

        if self.match is None:
            return self.text
        return self.match.full

    @property
    def regex_result(self) -> Optional[list[Optional[str]]]:
        if self.match is None:
            return None
        return self.match.as_list()

    def with_match(self, match: Optional[MatchResult]) -> "ClassifiedInput":
        return replace(self, match=match)


@dataclass(frozen=True)
class Context:
    """What the host knows about the surroundings of the selection."""

    has_formatting: bool = False
    can_paste: bool = False
    can_copy: bool = False
    can_cut: bool = False
    app_name: str = ""
    app_identifier: str = ""
    browser_url: Optional[str] = None
    browser_title: Optional[str] = None


@dataclass(frozen=True)
class Modifiers:
    """Modifier keys held when an action was invoked."""

    shift: bool = False
    control: bool = False
    option: bool = False
    command: bool = False


@dataclass(frozen=True)
class OptionDefinition:
    """One user-configurable extension option."""

    identifier: str
    type: str
    label: Optional[str] = None
    description: Optional[str] = None
    default_value: Any = None
    values: Tuple[str, ...] = ()
    hidden: bool = False
    inset: bool = False


ActionCode = Callable[..., Any]
PopulationCallback = Callable[..., Any]


@dataclass(frozen=True)
class ActionDeclaration:
    """Static description of a single action.

    ``None`` for requirements, pattern, or app lists means "inherit from the
    extension". An action without code is shown but permanently disabled.
    """

    identifier: str
    title: Optional[str] = None
    icon: Optional[str] = None
    inherit_icon: bool = True
    requirements: Optional[Tuple[str, ...]] = None
    pattern: Optional["TextPattern"] = None
    required_apps: Optional[Tuple[str, ...]] = None
    excluded_apps: Optional[Tuple[str, ...]] = None
    code: Optional[ActionCode] = None
    before: Optional[str] = None
    after: Optional[str] = None
    capture_html: bool = False
    capture_rtf: bool = False
    stay_visible: bool = False

    @property
    def enabled(self) -> bool:
        return self.code is not None


@dataclass(frozen=True)
class StaticActions:
    """A fixed list of declared actions, filtered per invocation."""

    actions: Tuple[ActionDeclaration, ...]


@dataclass(frozen=True)
class PopulatedActions:
    """A callback that computes the action list itself for each invocation."""

    callback: PopulationCallback


ActionSource = Union[StaticActions, PopulatedActions]


@dataclass(frozen=True)
class ExtensionDeclaration:
    """An extension's declared actions plus the defaults its actions inherit."""

    identifier: str
    source: ActionSource
    name: Optional[str] = None
    icon: Optional[str] = None
    options: Tuple[OptionDefinition, ...] = ()
    requirements: Optional[Tuple[str, ...]] = None
    pattern: Optional["TextPattern"] = None
    required_apps: Optional[Tuple[str, ...]] = None
    excluded_apps: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class ResolvedAction:
    """An action selected for one invocation, with its match data."""

    extension_id: str
    declaration: ActionDeclaration
    matched_text: str
    match: Optional[MatchResult] = None
    extension_name: Optional[str] = None
    extension_icon: Optional[str] = None

    @property
    def identifier(self) -> str:
        return self.declaration.identifier

    @property
    def title(self) -> str:
        return self.declaration.title or self.extension_name or self.declaration.identifier

    @property
    def icon(self) -> Optional[str]:
        if self.declaration.icon is not None or not self.declaration.inherit_icon:
            return self.declaration.icon
        return self.extension_icon
