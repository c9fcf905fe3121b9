"""Raw-selection-to-core mapping adapter.

The real host classifies selections with OS services. This adapter is the
small stand-in the command line uses to build a ClassifiedInput and Context
from plain strings, keeping that detection out of the core.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

from core.models import (
    EMAILS,
    OTHER_URLS,
    PATHS,
    WEB_URLS,
    ClassifiedInput,
    Context,
    DetectedItem,
    TextRange,
)

# Non-web schemes recognised as links; anything else is left alone.
ALLOWED_SCHEMES = ("ftp", "sftp", "ssh", "obsidian", "omnifocus", "things", "craftdocs", "raycast")

_TRAILING_PUNCTUATION = ".,;:!?)]}'\""

_WEB_URL = re.compile(r"\bhttps?://[^\s<>\"']+", re.IGNORECASE)
_OTHER_URL = re.compile(r"\b(?:%s):(?://)?[^\s<>\"']+" % "|".join(ALLOWED_SCHEMES), re.IGNORECASE)
_EMAIL = re.compile(r"(?<![\w.+-])[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
_PATH = re.compile(r"(?<![\w/:.~])(?:~/|/)[^\s\"'<>]+")
_BARE_DOMAIN = re.compile(r"^(?:https?://)?[\w-]+(?:\.[\w-]+)*\.[a-z]{2,}(?:[/?#]\S*)?$", re.IGNORECASE)


def _find(pattern: re.Pattern, text: str) -> Tuple[DetectedItem, ...]:
    items = []
    for found in pattern.finditer(text):
        value = found.group(0).rstrip(_TRAILING_PUNCTUATION)
        if not value:
            continue
        items.append(DetectedItem(text=value, range=TextRange(location=found.start(), length=len(value))))
    return tuple(items)


def detect_entities(text: str) -> Dict[str, Tuple[DetectedItem, ...]]:
    """Return detected URLs, emails, and paths keyed by entity kind."""

    data = {
        WEB_URLS: _find(_WEB_URL, text),
        OTHER_URLS: _find(_OTHER_URL, text),
        EMAILS: _find(_EMAIL, text),
        PATHS: _find(_PATH, text),
    }
    return {kind: items for kind, items in data.items() if items}


def build_input(
    text: str,
    html: Optional[str] = None,
    markdown: Optional[str] = None,
    rtf: Optional[str] = None,
) -> ClassifiedInput:
    """Build a ClassifiedInput from the selected text and optional renderings."""

    return ClassifiedInput(
        text=text,
        html=html,
        xhtml=html,
        markdown=markdown,
        rtf=rtf,
        data=detect_entities(text),
        is_url=bool(_BARE_DOMAIN.match(text.strip())),
    )


def build_context(
    app_identifier: str = "",
    app_name: str = "",
    can_paste: bool = False,
    can_cut: bool = False,
    has_formatting: bool = False,
    browser_url: Optional[str] = None,
    browser_title: Optional[str] = None,
    can_copy: bool = True,
) -> Context:
    """Build a Context snapshot from host flags."""

    return Context(
        has_formatting=has_formatting,
        can_paste=can_paste,
        can_copy=can_copy,
        can_cut=can_cut,
        app_name=app_name,
        app_identifier=app_identifier,
        browser_url=browser_url,
        browser_title=browser_title,
    )
