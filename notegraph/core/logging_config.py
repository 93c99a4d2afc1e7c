#!/usr/bin/env python3
"""
Logging for notegraph.

Every module logs through a child of the ``notegraph`` logger, so a host
application can route or silence the whole package with one logger. The
command-line tool calls ``setup_logging``; library users normally don't.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "notegraph"
LOG_LEVEL_ENV = "NOTEGRAPH_LOG_LEVEL"
DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(level: Union[str, int, None]) -> int:
    """
    Turn a level name or number into a logging level.

    ``None`` falls back to ``$NOTEGRAPH_LOG_LEVEL``, then INFO. Unknown names
    raise ValueError rather than silently logging at the wrong level.
    """
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or DEFAULT_LEVEL
    if isinstance(level, int):
        return level

    numeric = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return numeric


def _build_handler(handler: logging.Handler, level: int, format_string: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))
    return handler


def setup_logging(
    level: Union[str, int, None] = None,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    debug_mode: bool = False
) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the package logger.

    Calling it again replaces the previous handlers, closing them first so
    an earlier log file is released.

    Args:
        level: Level name or number; None reads ``$NOTEGRAPH_LOG_LEVEL``
        log_file: Optional file path for log output, parent dirs are created
        format_string: Custom log format string
        debug_mode: Force DEBUG regardless of ``level``

    Returns:
        The ``notegraph`` logger
    """
    numeric_level = logging.DEBUG if debug_mode else resolve_level(level)
    format_string = format_string or DEFAULT_FORMAT

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_build_handler(logging.StreamHandler(sys.stderr), numeric_level, format_string))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_build_handler(
            logging.FileHandler(log_path, encoding="utf-8"), numeric_level, format_string))

    logger.debug(f"Logging configured at {logging.getLevelName(numeric_level)}, file: {log_file}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under the ``notegraph`` namespace (never nested twice)."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
