"""Command-line interface for the Yape importer.

Parses command-line arguments, initializes config and logging, and
delegates to the two-phase importer: ``validate`` previews a report,
``confirm`` saves it into the SQLite store, ``history`` lists past imports.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from yapeimport import __version__
from yapeimport.config import DEFAULT_CONFIG_PATH, load_config
from yapeimport.errors import ConfigError, ProcessingError
from yapeimport.importer import TransactionImporter
from yapeimport.logger import setup_diagnostic_logging, setup_logging
from yapeimport.models import AppConfig
from yapeimport.report import (
    print_confirm_summary,
    print_upload_history,
    print_upload_summary,
)
from yapeimport.repository import InMemoryTransactionRepository
from yapeimport.sqlite_repository import SqliteTransactionRepository

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Accepts optional ``argv`` list for testability (defaults to
    ``sys.argv[1:]`` when None).

    Args:
        argv: Argument list to parse. None uses sys.argv[1:].

    Returns:
        Namespace with ``command``, ``config``, ``diagnostic`` and the
        per-command options.
    """
    parser = argparse.ArgumentParser(
        prog="yapeimport",
        description="Validate and import Yape transaction reports",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help=f"Settings file (default: {DEFAULT_CONFIG_PATH} when present)",
    )
    parser.add_argument(
        "--diagnostic",
        action="store_true",
        help="Show DEBUG-level output on the console",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="PATH",
        help="Also write a DEBUG-level log to this file",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Preview an import without saving")
    validate.add_argument("file", type=Path, help="Yape .xlsx/.xls report")
    validate.add_argument(
        "--json", action="store_true", help="Print the report as JSON on stdout",
    )

    confirm = sub.add_parser("confirm", help="Save a report's unique transactions")
    confirm.add_argument("file", type=Path, help="Yape .xlsx/.xls report")
    confirm.add_argument("--db", type=Path, default=None, metavar="PATH",
                         help="SQLite database (overrides the settings file)")
    confirm.add_argument(
        "--json", action="store_true", help="Print the result as JSON on stdout",
    )

    history = sub.add_parser("history", help="List confirmed imports")
    history.add_argument("--db", type=Path, default=None, metavar="PATH",
                         help="SQLite database (overrides the settings file)")
    return parser.parse_args(argv)


def _resolve_config(config_path: Path | None) -> AppConfig:
    """Load an explicit settings file, or the default one if it exists."""
    if config_path is not None:
        return load_config(config_path)
    default = Path.cwd() / DEFAULT_CONFIG_PATH
    if default.exists():
        return load_config(default)
    logger.debug("No settings file found; using defaults")
    return AppConfig()


def _read_upload(path: Path) -> bytes:
    """Read the report bytes, exiting with code 2 when unreadable."""
    try:
        return path.read_bytes()
    except OSError as e:
        logger.error("Cannot read %s: %s", path, e)
        sys.exit(2)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Exits with 0 on success, 1 when the report is rejected (structural
    error or failed save), 2 on configuration or file access problems.

    Args:
        argv: Argument list to parse. None uses sys.argv[1:].
    """
    args = parse_args(argv)

    if args.diagnostic:
        setup_diagnostic_logging(args.log_file)
    else:
        setup_logging(args.log_file)

    try:
        config = _resolve_config(args.config)
    except ConfigError as e:
        logger.error("[%s] %s", e.code, e.message)
        sys.exit(2)

    if args.command == "history":
        db_path = args.db or config.database_path
        if not db_path.exists():
            logger.debug("No database at %s", db_path)
            print_upload_history([])
            sys.exit(0)
        with SqliteTransactionRepository(db_path) as repo:
            print_upload_history(repo.list_upload_history())
        sys.exit(0)

    content = _read_upload(args.file)
    filename = args.file.name

    try:
        if args.command == "validate":
            importer = TransactionImporter(InMemoryTransactionRepository(), config)
            result = importer.validate(content, filename)
            print_upload_summary(filename, result)
            if args.json:
                print(json.dumps(result.to_json_dict(), ensure_ascii=False, indent=2))
        else:
            with SqliteTransactionRepository(args.db or config.database_path) as repo:
                confirmed = TransactionImporter(repo, config).confirm(content, filename)
            print_confirm_summary(filename, confirmed)
            if args.json:
                print(json.dumps(confirmed.to_json_dict(), indent=2))
    except ProcessingError as e:
        logger.error("[%s] %s", e.code, e.message)
        sys.exit(1)

    sys.exit(0)
