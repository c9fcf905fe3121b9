from __future__ import annotations

from adapters.selection_mapper import build_context, build_input
from core.models import EMAILS, OTHER_URLS, PATHS, WEB_URLS


def _texts(selection, kind: str) -> list[str]:
    return [item.text for item in selection.items(kind)]


def test_detects_entities_with_ranges() -> None:
    text = "Docs at https://example.com/a, mail bob@example.org, file ~/notes.txt or ftp://files.host."
    selection = build_input(text)

    assert _texts(selection, WEB_URLS) == ["https://example.com/a"]
    assert selection.items(WEB_URLS)[0].range.location == text.index("https://")
    assert _texts(selection, EMAILS) == ["bob@example.org"]
    assert _texts(selection, PATHS) == ["~/notes.txt"]
    assert _texts(selection, OTHER_URLS) == ["ftp://files.host"]
    assert not selection.is_url


def test_url_parts_are_not_paths() -> None:
    selection = build_input("https://example.com/some/path")

    assert _texts(selection, PATHS) == []
    assert selection.is_url


def test_bare_domain_counts_as_url_text() -> None:
    assert build_input("  popclip.app ").is_url
    assert not build_input("hello world").is_url


def test_build_context_defaults() -> None:
    context = build_context(app_identifier="com.apple.Safari", can_paste=True)

    assert context.app_identifier == "com.apple.Safari"
    assert context.can_paste
    assert context.can_copy
    assert not context.can_cut
