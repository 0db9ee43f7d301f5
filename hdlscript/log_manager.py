# hdlscript/log_manager.py
"""
Logger factory for hdlscript.

:func:`get_logger` hands out a configured :class:`logging.Logger`:

- one console handler per logger, on **stderr** (stdout carries the script),
  colored through ``colorlog`` when stderr is a terminal;
- an optional UTF-8 log file, attached once per path, with timestamps;
- ``propagate = False`` so an application that also configures the root
  logger does not print every record twice.

Environment variables
---------------------
HDLSCRIPT_FORCE_COLOR=true|false
    Force colored console output on or off regardless of the terminal.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Dict, Optional

import colorlog

__all__ = ["get_logger", "LOGGER_NAME"]

LOGGER_NAME = "hdlscript"

_CONSOLE_FMT = "%(levelname)-8s %(name)s: %(message)s"
_COLOR_CONSOLE_FMT = "%(log_color)s%(levelname)-8s%(reset)s %(name)s: %(message)s"
_FILE_FMT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

_COLORS: Dict[str, str] = {
    "DEBUG": "blue",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

_MARKER = "_hdlscript_console"


def _should_use_color(force_color: Optional[bool] = None) -> bool:
    """Decide on colored console output: argument, then env var, then TTY."""
    if force_color is not None:
        return force_color
    env = os.getenv("HDLSCRIPT_FORCE_COLOR")
    if env is not None:
        return env.strip().lower() in {"1", "true", "yes", "on"}
    isatty = getattr(sys.stderr, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:  # closed stream
        return False


def _console_handler(color: bool) -> logging.Handler:
    if color:
        handler: logging.Handler = colorlog.StreamHandler(sys.stderr)
        handler.setFormatter(colorlog.ColoredFormatter(_COLOR_CONSOLE_FMT, log_colors=_COLORS))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_CONSOLE_FMT))
    setattr(handler, _MARKER, True)
    return handler


def _has_file_handler(logger: logging.Logger, path: str) -> bool:
    return any(
        isinstance(h, logging.FileHandler) and h.baseFilename == path for h in logger.handlers
    )


def get_logger(
    name: str = LOGGER_NAME,
    level: int = logging.WARNING,
    log_to_file: Optional[str] = None,
    force_color: Optional[bool] = None,
) -> logging.Logger:
    """
    Return the logger ``name``, configuring it on first use.

    Parameters
    ----------
    name : str, default "hdlscript"
        Logger name. The pipeline modules log to ``"hdlscript"``.
    level : int, default logging.WARNING
        Level set on the logger (every call updates it).
    log_to_file : Optional[str], default None
        Also log to this file. Repeated calls with the same path are no-ops.
    force_color : Optional[bool], default None
        Override the color decision for the console handler. Only honored
        when the console handler is first created.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not any(getattr(h, _MARKER, False) for h in logger.handlers):
        logger.addHandler(_console_handler(_should_use_color(force_color)))

    if log_to_file:
        path = os.path.abspath(log_to_file)
        if not _has_file_handler(logger, path):
            try:
                fhandler = logging.FileHandler(path, encoding="utf-8")
            except OSError as exc:
                logger.error("Cannot open log file '%s': %s", path, exc)
            else:
                fhandler.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_FILE_DATEFMT))
                logger.addHandler(fhandler)

    logger.propagate = False
    return logger
