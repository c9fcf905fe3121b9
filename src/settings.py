"""Static configuration for clipdeck.

All user-editable settings (extensions, module repository, transpiler, logging)
live in a single JSON file for quick edits without touching Python.
"""

import json
import os

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# A local .env may point CLIPDECK_CONFIG at another file.
load_dotenv()
CONFIG_PATH = os.getenv("CLIPDECK_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _project_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


def _normalize_extensions(raw_extensions: list[dict]) -> list[dict]:
    """Keep enabled extensions and make their package paths absolute."""

    extensions: list[dict] = []
    for entry in raw_extensions:
        path = entry.get("path")
        if not path:
            continue
        if not entry.get("enabled", True):
            continue
        extensions.append({"path": _project_path(path), "options": dict(entry.get("options", {}))})
    return extensions


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Extension packages are loaded in this order, which is also popup order.
EXTENSIONS = _normalize_extensions(_CONFIG.get("extensions", []))

# Module loading: the shared repository is consulted after the package root.
_modules = _CONFIG.get("modules", {})
_repository = _modules.get("repository")
MODULE_REPOSITORY = _project_path(_repository) if _repository else None
MODULE_SUFFIXES = tuple(_modules.get("suffixes", [".js", ".ts", ".json"]))
TYPED_SUFFIXES = tuple(_modules.get("typed_suffixes", [".ts"]))
DATA_SUFFIXES = tuple(_modules.get("data_suffixes", [".json"]))
ENTRY_MODULE = _modules.get("entry", "Config")

# Typed sources need an external transpiler (argv list reading stdin).
_transpiler = _CONFIG.get("transpiler", {})
TRANSPILER_COMMAND = list(_transpiler.get("command", []))
TRANSPILER_TIMEOUT = float(_transpiler.get("timeout", 30))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
