#!/usr/bin/env python3
# DiskScore
# Copyright (C) 2026 Magnus S. Modig
# Licensed under GPLv3. See LICENSE for details.

"""Logging for DiskScore: Rich console handler on stderr, optional log file."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Diagnostics go to stderr so they never interleave with the report on stdout
log_console = Console(stderr=True)

ROOT_LOGGER_NAME = "diskscore"

LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}

_file_logging_configured = False
_console_level = logging.WARNING


def level_for(verbosity: str) -> int:
    """Translate a config verbosity string into a logging level"""
    return LEVELS.get(str(verbosity).lower(), logging.WARNING)


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> Optional[Path]:
    """
    Attach a file handler to the diskscore logger tree.

    Args:
        log_file: Path to log file. Nothing is attached when empty.
        verbose: Enable debug-level logging

    Returns:
        The log file path in use, or None when file logging is off.
    """
    global _file_logging_configured

    if not log_file:
        return None
    target = Path(log_file).expanduser()
    if _file_logging_configured:
        return target

    target.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    file_handler = logging.FileHandler(target)
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    _file_logging_configured = True
    root_logger.info(f"DiskScore logging initialized: {target}")
    return target


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the diskscore namespace with a Rich console handler.

    The logger itself passes everything; each handler filters on its own
    level, so the console and the log file can differ.

    Args:
        name: Logger name (typically __name__)
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=log_console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler.setLevel(_console_level)
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)

    return logger


def set_console_level(verbosity: str) -> None:
    """Apply a verbosity setting to every console handler, present and future"""
    global _console_level

    _console_level = level_for(verbosity)
    for logger in logging.Logger.manager.loggerDict.values():
        if not isinstance(logger, logging.Logger):
            continue
        if not logger.name.startswith(ROOT_LOGGER_NAME):
            continue
        for handler in logger.handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(_console_level)
