# hdlscript/emitter.py
"""
Template context assembly and rendering.

This module provides:
- :func:`build_context`, which turns an :class:`~hdlscript.aggregate.Aggregate`
  plus the backend flags into the plain dict handed to templates. The shape of
  this dict (not the templating mechanism) is the contract for custom
  templates, and it is what ``template_json`` prints.
- :class:`TemplateRenderer`, a thin wrapper around Jinja2 that renders the
  built-in backend templates shipped in ``hdlscript/templates`` or a
  user-supplied template string, and surfaces explicit exceptions on failure.
- :func:`emit`, the format dispatch.

Template helpers
----------------
Every template (built-in or custom) gets these filters:

``fmt_define``
    ``(name, value)`` -> ``NAME`` or ``NAME=VALUE`` (name uppercased).
``root_var``
    Path under ``root`` -> ``$ROOT/<rel>``; other paths unchanged.
``relpath``
    Path under ``root`` -> ``<rel>``; other paths unchanged.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from jinja2 import (
    Environment,
    FileSystemLoader,
    TemplateNotFound,
    TemplateSyntaxError,
    pass_context,
)

from hdlscript.aggregate import Aggregate, Define
from hdlscript.errors import RenderError, TemplateLoadError, UnknownFormatError
from hdlscript.formats import TEMPLATE_FILES, ScriptFormat

__all__ = [
    "HEADER_AUTOGEN",
    "ROOT_TOKEN",
    "TEMPLATE_DIR",
    "TemplateRenderer",
    "build_context",
    "emit",
    "format_define",
    "load_custom_template",
    "relativize_path",
    "render_context_json",
]

logger = logging.getLogger("hdlscript")

HEADER_AUTOGEN = "This script was generated automatically by hdlscript."

#: Placeholder written in place of the tree root by :func:`relativize_path`.
ROOT_TOKEN = "$ROOT"

#: Directory holding the built-in backend templates.
TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

PathLike = Union[str, Path, PurePosixPath]


# ---------------
# Path / define helpers
# ---------------

def _relative_part(path: PathLike, root: PathLike) -> Optional[str]:
    """``path`` relative to ``root`` as a POSIX string, or None if outside root."""
    try:
        rel = PurePosixPath(str(path)).relative_to(PurePosixPath(str(root)))
    except ValueError:
        return None
    return rel.as_posix()


def relativize_path(path: PathLike, root: PathLike, token: str = ROOT_TOKEN) -> str:
    """Rewrite ``path`` under ``root`` to ``<token>/<rel>``; leave other paths alone."""
    rel = _relative_part(path, root)
    if rel is None:
        return str(path)
    return token if rel == "." else f"{token}/{rel}"


def format_define(define: Sequence[Optional[str]]) -> str:
    """Render a ``(name, value)`` define as ``NAME`` or ``NAME=VALUE``."""
    name, value = define[0], define[1]
    text = str(name).upper()
    if value:
        text += f"={value}"
    return text


@pass_context
def _root_var_filter(ctx, path: PathLike) -> str:
    return relativize_path(path, ctx.get("root", ""))


@pass_context
def _relpath_filter(ctx, path: PathLike) -> str:
    rel = _relative_part(path, ctx.get("root", ""))
    return str(path) if rel is None else rel


# ---------------
# Context assembly
# ---------------

def _paths(paths: Sequence[PathLike]) -> list:
    return [PurePosixPath(str(p)).as_posix() for p in paths]


def _defines(defines: Sequence[Define]) -> list:
    return [[name, value] for name, value in defines]


def build_context(
    root: PathLike,
    agg: Aggregate,
    *,
    abort_on_error: bool = True,
    vlog_args: Sequence[str] = (),
    vcom_args: Sequence[str] = (),
    vlogan_bin: str = "vlogan",
    vhdlan_bin: str = "vhdlan",
    relativize: bool = False,
    compilation_mode: str = "separate",
    no_simset: bool = False,
) -> Dict[str, Any]:
    """Assemble the template context.

    ``agg`` is expected to already carry any ``only_*`` restriction (see
    :meth:`Aggregate.restrict`). All paths become POSIX strings and defines
    become ``[name, value]`` pairs so the context is JSON-serializable.
    """
    return {
        "HEADER_AUTOGEN": HEADER_AUTOGEN,
        "root": PurePosixPath(str(root)).as_posix(),
        "abort_on_error": bool(abort_on_error),
        "global_defines": _defines(agg.global_defines),
        "all_defines": _defines(agg.all_defines),
        "all_incdirs": _paths(agg.all_incdirs),
        "all_files": _paths(agg.all_files),
        "srcs": [
            {
                "defines": _defines(batch.defines),
                "incdirs": _paths(batch.incdirs),
                "files": _paths(batch.files),
                "file_type": batch.file_type.value,
            }
            for batch in agg.srcs
        ],
        "all_verilog": _paths(agg.all_verilog),
        "all_vhdl": _paths(agg.all_vhdl),
        "vlog_args": list(vlog_args),
        "vcom_args": list(vcom_args),
        "vlogan_bin": vlogan_bin,
        "vhdlan_bin": vhdlan_bin,
        "relativize_path": bool(relativize),
        "compilation_mode": compilation_mode,
        "vivado_filesets": [""] if no_simset else ["", " -simset"],
    }


def render_context_json(context: Mapping[str, Any]) -> str:
    """Pretty-print the context for external tooling (``template_json``)."""
    return json.dumps(context, indent=2) + "\n"


def load_custom_template(path: PathLike) -> str:
    """Read a user-supplied template as UTF-8 text.

    Raises
    ------
    TemplateLoadError
        If the file cannot be read or is not valid UTF-8.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise TemplateLoadError(f"Cannot read template '{path}': {exc}") from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TemplateLoadError(f"Template '{path}' is not valid UTF-8: {exc}") from exc


# ---------------
# Rendering
# ---------------

class TemplateRenderer:
    """
    Thin wrapper over Jinja2 for rendering backend templates.

    Parameters
    ----------
    template_dir : Optional[os.PathLike]
        Folder containing the built-in templates. Defaults to
        :data:`TEMPLATE_DIR`.

    Notes
    -----
    - ``trim_blocks``/``lstrip_blocks`` are on, so a line holding only a block
      tag produces no output; template text lines are emitted verbatim.
    - Undefined variables render as "" so that custom templates written
      against an older context keep working.
    """

    def __init__(self, template_dir: Optional[PathLike] = None) -> None:
        self.template_dir = Path(template_dir) if template_dir is not None else TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.env.filters["fmt_define"] = format_define
        self.env.filters["root_var"] = _root_var_filter
        self.env.filters["relpath"] = _relpath_filter
        logger.debug("TemplateRenderer initialized (dir=%s)", self.template_dir)

    def render(self, template_file: str, context: Mapping[str, Any]) -> str:
        """Render the built-in template ``template_file`` with ``context``.

        Raises
        ------
        RenderError
            If the template is missing, malformed, or fails while rendering.
        """
        try:
            template = self.env.get_template(template_file)
        except TemplateNotFound as exc:
            raise RenderError(
                f"Template '{template_file}' not found in '{self.template_dir}'."
            ) from exc
        except TemplateSyntaxError as exc:
            raise RenderError(
                f"Syntax error in template '{template_file}' at line {exc.lineno}: {exc.message}"
            ) from exc
        return self._render(template, template_file, context)

    def render_string(self, source: str, context: Mapping[str, Any]) -> str:
        """Render a user-supplied template ``source`` with ``context``."""
        try:
            template = self.env.from_string(source)
        except TemplateSyntaxError as exc:
            raise RenderError(
                f"Failed to render template. Syntax error at line {exc.lineno}: {exc.message}"
            ) from exc
        return self._render(template, "<custom>", context)

    @staticmethod
    def _render(template, name: str, context: Mapping[str, Any]) -> str:
        try:
            return template.render(dict(context))
        except Exception as exc:
            # Jinja runtime errors (bad filter args, failing tests, ...)
            raise RenderError(f"Failed to render template '{name}': {exc}") from exc


def emit(
    fmt: ScriptFormat,
    context: Mapping[str, Any],
    template_source: Optional[str] = None,
    renderer: Optional[TemplateRenderer] = None,
) -> str:
    """Produce the final text for ``fmt``.

    ``template_source`` is required for :attr:`ScriptFormat.TEMPLATE`.
    """
    if fmt is ScriptFormat.TEMPLATE_JSON:
        return render_context_json(context)

    renderer = renderer or TemplateRenderer()
    if fmt is ScriptFormat.TEMPLATE:
        if template_source is None:
            raise RenderError("No template source given for format 'template'.")
        return renderer.render_string(template_source, context)

    template_file = TEMPLATE_FILES.get(fmt)
    if template_file is None:
        raise UnknownFormatError(f"No template registered for format {fmt!r}")
    logger.debug("Rendering %s with %s", fmt.value, template_file)
    return renderer.render(template_file, context)
