# hdlscript/config.py
"""
Environment-driven settings.

A ``.env`` file in the working directory (or any parent) is loaded first with
python-dotenv; real environment variables take precedence over it.

Variables
---------
HDLSCRIPT_MANIFEST
    Default resolved-sources manifest (``sources.yml`` if unset).
HDLSCRIPT_LOG_LEVEL
    Default log level name (``WARNING`` if unset).
HDLSCRIPT_FORCE_COLOR
    Force colored logs on/off (see :mod:`hdlscript.log_manager`).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

__all__ = ["Settings", "load_settings", "DEFAULT_MANIFEST"]

DEFAULT_MANIFEST = "sources.yml"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    manifest: str = DEFAULT_MANIFEST
    log_level: int = logging.WARNING
    force_color: Optional[bool] = None


def _parse_level(value: Optional[str]) -> int:
    if not value:
        return logging.WARNING
    value = value.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else logging.WARNING


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    value = value.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return None


def load_settings(dotenv: bool = True) -> Settings:
    """Read settings from the environment (after loading ``.env``)."""
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    return Settings(
        manifest=os.getenv("HDLSCRIPT_MANIFEST") or DEFAULT_MANIFEST,
        log_level=_parse_level(os.getenv("HDLSCRIPT_LOG_LEVEL")),
        force_color=_parse_bool(os.getenv("HDLSCRIPT_FORCE_COLOR")),
    )
