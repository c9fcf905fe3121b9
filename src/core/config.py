"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so the app layer can build them safely from settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class LoaderConfig:
    """Module resolution and loading settings."""

    # Candidate suffixes, tried in order when a reference has no extension.
    suffixes: Tuple[str, ...] = (".js", ".ts", ".json")
    # Sources in the typed dialect are transpiled before evaluation.
    typed_suffixes: Tuple[str, ...] = (".ts",)
    # Data files are parsed and exported as-is, without evaluation.
    data_suffixes: Tuple[str, ...] = (".json",)
    # Shared libraries available to every extension, consulted last.
    repository_root: Optional[str] = None


@dataclass(frozen=True)
class EngineConfig:
    """Action resolution settings."""

    # Requirement list used when neither the action nor its extension has one.
    default_requirements: Tuple[str, ...] = ("text",)
    # Entry module of an extension package.
    entry_module: str = "Config"
