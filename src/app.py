"""Application entry point for the clipdeck extension host."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

import settings
from adapters.filesystem import LocalFileSystem
from adapters.python_runtime import PythonScriptRuntime
from adapters.selection_mapper import build_context, build_input
from adapters.transpiler import SubprocessTranspiler
from core.config import EngineConfig, LoaderConfig
from core.errors import HostError
from core.host import ExtensionHost
from core.loader import ModuleLoader
from core.models import Context, Modifiers
from core.options import AUTH_SECRET

NAME = "CLIPDECK"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict, extensions: list[dict]) -> list[str]:
    """Return the strings the log formatter masks, longest first.

    Stored sign-in secrets of configured extensions are always masked; values
    of the environment variables named in ``redact.patterns`` only when
    ``redact.enabled`` is set.
    """

    values = {
        str(entry["options"][AUTH_SECRET])
        for entry in extensions
        if entry.get("options", {}).get(AUTH_SECRET)
    }
    redact_cfg = config.get("redact", {}) if config else {}
    if redact_cfg.get("enabled", False):
        values.update(filter(None, (os.getenv(name) for name in redact_cfg.get("patterns", []))))
    return sorted(values, key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config, settings.EXTENSIONS)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/clipdeck.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _build_host() -> ExtensionHost:
    """Wire adapters into the core and load every configured extension."""

    logger = logging.getLogger(__name__)
    loader_config = LoaderConfig(
        suffixes=settings.MODULE_SUFFIXES,
        typed_suffixes=settings.TYPED_SUFFIXES,
        data_suffixes=settings.DATA_SUFFIXES,
        repository_root=settings.MODULE_REPOSITORY,
    )
    transpiler = None
    if settings.TRANSPILER_COMMAND:
        transpiler = SubprocessTranspiler(settings.TRANSPILER_COMMAND, timeout=settings.TRANSPILER_TIMEOUT)

    loader = ModuleLoader(LocalFileSystem(), PythonScriptRuntime(), transpiler=transpiler, config=loader_config)
    host = ExtensionHost(loader, EngineConfig(entry_module=settings.ENTRY_MODULE))

    # A broken extension is reported and skipped; the others still load.
    for entry in settings.EXTENSIONS:
        try:
            host.load_extension(entry["path"], entry["options"])
        except HostError:
            logger.exception("Failed to load extension at %s", entry["path"])

    logger.info("%s extensions are loaded", len(host.extensions))
    return host


def _context_from_args(args: argparse.Namespace) -> Context:
    return build_context(
        app_identifier=args.app,
        app_name=args.app_name,
        can_paste=args.paste,
        can_cut=args.cut,
        has_formatting=args.formatting,
        browser_url=args.browser_url,
    )


def _list(console: Console) -> None:
    host = _build_host()
    table = Table(title="Extensions")
    table.add_column("Extension")
    table.add_column("Actions")
    for extension in host.extensions:
        source = extension.declaration.source
        actions = getattr(source, "actions", None)
        if actions is None:
            summary = "(dynamic)"
        else:
            summary = ", ".join(action.identifier for action in actions) or "-"
        table.add_row(extension.declaration.name or extension.identifier, summary)
    console.print(table)


def _resolve(console: Console, args: argparse.Namespace) -> None:
    host = _build_host()
    selection = build_input(args.text)
    resolved = host.resolve(selection, _context_from_args(args))

    table = Table(title=f"Actions for {args.text!r}")
    table.add_column("#", justify="right")
    table.add_column("Extension")
    table.add_column("Action")
    table.add_column("Title")
    table.add_column("Matched text")
    for index, action in enumerate(resolved, start=1):
        title = action.title if action.declaration.enabled else f"{action.title} (disabled)"
        table.add_row(str(index), action.extension_id, action.identifier, title, action.matched_text)
    console.print(table)


def _run_action(console: Console, args: argparse.Namespace) -> int:
    host = _build_host()
    selection = build_input(args.text)
    context = _context_from_args(args)
    resolved = host.resolve(selection, context)

    chosen = next((action for action in resolved if args.action in {action.identifier, action.title}), None)
    if chosen is None:
        console.print(f"Action {args.action!r} is not offered for this selection.")
        return 1

    modifiers = Modifiers(shift=args.shift, option=args.option)
    result = asyncio.run(host.invoke(chosen, selection, context, modifiers))
    if result is not None:
        console.print(result)
    return 0


def _add_selection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("text", help="Selected text")
    parser.add_argument("--app", default="", help="Bundle identifier of the host app")
    parser.add_argument("--app-name", default="", help="Display name of the host app")
    parser.add_argument("--browser-url", default=None, help="Page URL when the host app is a browser")
    parser.add_argument("--paste", action="store_true", help="Paste is available")
    parser.add_argument("--cut", action="store_true", help="Cut is available")
    parser.add_argument("--formatting", action="store_true", help="Target supports formatting")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="clipdeck")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("list", help="List loaded extensions and their actions")
    resolve_parser = subparsers.add_parser("resolve", help="Show the actions offered for a selection")
    _add_selection_arguments(resolve_parser)
    run_parser = subparsers.add_parser("run", help="Resolve, then invoke one action")
    run_parser.add_argument("action", help="Identifier or title of the action to run")
    _add_selection_arguments(run_parser)
    run_parser.add_argument("--shift", action="store_true", help="Invoke with Shift held")
    run_parser.add_argument("--option", action="store_true", help="Invoke with Option held")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return

    _print_banner()
    _configure_logging()
    console = Console()
    try:
        if args.command == "list":
            _list(console)
        elif args.command == "resolve":
            _resolve(console, args)
        elif args.command == "run":
            sys.exit(_run_action(console, args))
    except HostError as exc:
        logging.getLogger(__name__).error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
