# hdlscript/errors.py
"""
Exception hierarchy for hdlscript.

Every failure of a single `hdlscript script` invocation is surfaced as a
subclass of :class:`HdlScriptError`. The CLI maps them to a non-zero exit code;
nothing in the pipeline is retried.
"""

from __future__ import annotations

__all__ = [
    "HdlScriptError",
    "OptionConflictError",
    "TemplateLoadError",
    "RenderError",
    "UnknownFormatError",
    "ManifestNotFoundError",
    "ManifestParseError",
]


class HdlScriptError(Exception):
    """Base class for all hdlscript errors."""


class OptionConflictError(HdlScriptError, ValueError):
    """Raised when a backend-restricted option is used with an incompatible format."""


class TemplateLoadError(HdlScriptError, OSError):
    """Raised when a custom template file cannot be read or is not valid UTF-8."""


class RenderError(HdlScriptError, RuntimeError):
    """Raised when Jinja2 rejects a template or fails while rendering it."""


class UnknownFormatError(HdlScriptError, RuntimeError):
    """Raised for a format value that slipped past validation (should not happen)."""


class ManifestNotFoundError(HdlScriptError, FileNotFoundError):
    """Raised when the resolved-sources manifest cannot be found."""


class ManifestParseError(HdlScriptError, RuntimeError):
    """Raised when the resolved-sources manifest cannot be parsed."""
