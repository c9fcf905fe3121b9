"""Extension option values (core domain)."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

from core.errors import NotSignedInError
from core.models import OptionDefinition

AUTH_SECRET = "authsecret"


def default_value(option: OptionDefinition) -> Any:
    """Return the value an option takes before the user changes it."""

    if option.default_value is not None:
        return option.default_value
    if option.type == "boolean":
        return True
    if option.type == "multiple":
        return option.values[0] if option.values else ""
    return ""


class OptionValues(Mapping[str, Any]):
    """Read-only current option values of one extension.

    Reading ``authsecret`` while it is missing or empty raises NotSignedInError.
    """

    def __init__(self, values: Mapping[str, Any]) -> None:
        self._values = dict(values)

    def __getitem__(self, key: str) -> Any:
        if key == AUTH_SECRET and not self._values.get(AUTH_SECRET):
            raise NotSignedInError()
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        shown = {key: ("***" if key == AUTH_SECRET else value) for key, value in self._values.items()}
        return f"OptionValues({shown!r})"


def build_option_values(
    definitions: Iterable[OptionDefinition],
    stored: Optional[Mapping[str, Any]] = None,
) -> OptionValues:
    """Overlay stored values on the defaults of every valued option."""

    values: Dict[str, Any] = {}
    for option in definitions:
        if option.type == "heading":
            continue
        values[option.identifier] = default_value(option)
    if stored:
        values.update(stored)
    return OptionValues(values)
