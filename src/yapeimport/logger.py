"""Logging configuration for the Yape importer.

Console output for operators (INFO, or DEBUG in diagnostic mode) plus an
optional DEBUG-level log file kept next to the imported data.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_PACKAGE_LOGGER = "yapeimport"


def _setup_logging_base(log_path: Path | None, console_level: int) -> logging.Logger:
    """Attach a console handler and, when possible, a file handler.

    Handlers are installed on the package logger and replaced on repeated
    calls, so configuring twice never duplicates output.

    Args:
        log_path: Log file path, or None for console-only logging.
        console_level: Minimum level for console output.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(_PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    if log_path is not None:
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
        except OSError as e:
            # Log write failure to console but continue processing
            logger.warning("Failed to create log file at %s: %s", log_path, e)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter(
                    "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            logger.addHandler(file_handler)

    return logger


def setup_logging(log_path: Path | None = None) -> logging.Logger:
    """Configure console (INFO) and file (DEBUG) logging."""
    return _setup_logging_base(log_path, logging.INFO)


def setup_diagnostic_logging(log_path: Path | None = None) -> logging.Logger:
    """Same as setup_logging() but with DEBUG console output."""
    return _setup_logging_base(log_path, logging.DEBUG)
