# hdlscript/cli.py
"""
hdlscript command-line interface.

This module defines the top-level Click group and the ``script`` command that
turns a resolved source manifest into a backend compile script (or a flat file
list) on stdout.

Notes
-----
- Option conflicts are checked before the manifest is even read.
- Every :class:`~hdlscript.errors.HdlScriptError` is reported on stderr and
  maps to exit code 1; nothing is retried.
- Logs go to stderr so they never mix with the generated script.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Tuple

import click

from hdlscript.config import Settings, load_settings
from hdlscript.errors import HdlScriptError
from hdlscript.formats import ScriptFormat
from hdlscript.log_manager import get_logger
from hdlscript.resolver import ManifestResolver
from hdlscript.script import COMPILATION_MODES, ScriptOptions, check_options, generate_script

__all__ = ["cli", "script"]

logger = logging.getLogger("hdlscript")


def _level_for(verbose: int, default: int) -> int:
    """Map ``-v`` count onto a log level (``-v`` INFO, ``-vv`` DEBUG)."""
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return min(default, logging.INFO)
    return default


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv).")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Also write logs to this file.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int, log_file: Optional[str]) -> None:
    """
    hdlscript: emit EDA tool scripts from a resolved HDL source tree.

    Tip: run `hdlscript script --help` for the list of formats and options.
    """
    settings = load_settings()
    get_logger(
        level=_level_for(verbose, settings.log_level),
        log_to_file=log_file,
        force_color=settings.force_color,
    )
    ctx.obj = settings


@cli.command("script")
@click.argument("format", type=click.Choice(ScriptFormat.names()))
@click.option(
    "-t",
    "--target",
    "targets",
    multiple=True,
    help="Only include sources that match the given target.",
)
@click.option(
    "--no-default-target",
    is_flag=True,
    help="Remove any default targets that may be added to the generated script.",
)
@click.option("--relative-path", is_flag=True, help="Use relative paths (flist generation only).")
@click.option(
    "-D",
    "--define",
    "defines",
    multiple=True,
    metavar="NAME[=VALUE]",
    help="Pass an additional define to all source files.",
)
@click.option(
    "--vcom-arg",
    "vcom_args",
    multiple=True,
    help="Pass an argument to vcom calls (vsim/vhdlan/riviera only).",
)
@click.option(
    "--vlog-arg",
    "vlog_args",
    multiple=True,
    help="Pass an argument to vlog calls (vsim/vlogan/riviera only).",
)
@click.option("--only-defines", is_flag=True, help="Only output commands to define macros (Vivado only).")
@click.option(
    "--only-includes",
    is_flag=True,
    help="Only output commands to define include directories (Vivado only).",
)
@click.option("--only-sources", is_flag=True, help="Only output commands to define source files (Vivado only).")
@click.option("--no-simset", is_flag=True, help="Do not change `simset` fileset (Vivado only).")
@click.option("--vlogan-bin", default="vlogan", show_default=True, help="Specify a `vlogan` command.")
@click.option("--vhdlan-bin", default="vhdlan", show_default=True, help="Specify a `vhdlan` command.")
@click.option(
    "--no-abort-on-error",
    is_flag=True,
    help="Do not abort analysis/compilation on first caught error "
    "(only for programs that support early aborting).",
)
@click.option(
    "--compilation-mode",
    type=click.Choice(list(COMPILATION_MODES)),
    default="separate",
    show_default=True,
    help="Choose compilation mode option: separate/common.",
)
@click.option("-p", "--package", "packages", multiple=True, help="Specify package to show sources for.")
@click.option(
    "-n",
    "--no-deps",
    is_flag=True,
    help="Exclude all dependencies, i.e. only top level or specified package(s).",
)
@click.option("-e", "--exclude", "excludes", multiple=True, help="Specify package to exclude from sources.")
@click.option(
    "--template",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a file containing the Jinja2 template to render (format 'template').",
)
@click.option(
    "-m",
    "--manifest",
    type=click.Path(dir_okay=False),
    default=None,
    help="Resolved source manifest (default: $HDLSCRIPT_MANIFEST or sources.yml).",
)
@click.pass_obj
def script(
    settings: Optional[Settings],
    format: str,
    targets: Tuple[str, ...],
    no_default_target: bool,
    relative_path: bool,
    defines: Tuple[str, ...],
    vcom_args: Tuple[str, ...],
    vlog_args: Tuple[str, ...],
    only_defines: bool,
    only_includes: bool,
    only_sources: bool,
    no_simset: bool,
    vlogan_bin: str,
    vhdlan_bin: str,
    no_abort_on_error: bool,
    compilation_mode: str,
    packages: Tuple[str, ...],
    no_deps: bool,
    excludes: Tuple[str, ...],
    template: Optional[str],
    manifest: Optional[str],
) -> None:
    """Emit tool scripts for the package."""
    settings = settings or load_settings()
    fmt = ScriptFormat.get(format)
    options = ScriptOptions(
        targets=targets,
        no_default_target=no_default_target,
        relative_path=relative_path,
        defines=defines,
        vcom_args=vcom_args,
        vlog_args=vlog_args,
        only_defines=only_defines,
        only_includes=only_includes,
        only_sources=only_sources,
        no_simset=no_simset,
        vlogan_bin=vlogan_bin,
        vhdlan_bin=vhdlan_bin,
        no_abort_on_error=no_abort_on_error,
        compilation_mode=compilation_mode,
        packages=packages,
        no_deps=no_deps,
        excludes=excludes,
        template=template,
    )

    try:
        check_options(fmt, options)
        resolver = ManifestResolver(manifest or settings.manifest)
        sources = asyncio.run(resolver.sources())
        text = generate_script(sources, fmt, options)
    except HdlScriptError as exc:
        logger.debug("script %s failed", fmt.value, exc_info=True)
        raise click.ClickException(str(exc)) from exc

    click.echo(text, nl=False)


if __name__ == "__main__":
    cli()
