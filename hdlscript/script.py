# hdlscript/script.py
"""
Pipeline orchestration for the ``script`` command.

    validate -> target filter -> package filter -> flatten
             -> categorize/aggregate -> context -> render

:func:`generate_script` is pure with respect to its inputs: the same resolved
tree and the same :class:`ScriptOptions` always give byte-identical text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from hdlscript.aggregate import Aggregate, aggregate, parse_define
from hdlscript.emitter import TemplateRenderer, build_context, emit, load_custom_template
from hdlscript.errors import OptionConflictError
from hdlscript.filters import (
    filter_packages_or_empty,
    filter_targets_or_empty,
    resolve_package_list,
)
from hdlscript.flatten import flatten
from hdlscript.formats import ScriptFormat, default_targets, validate_options
from hdlscript.resolver import ResolvedSources
from hdlscript.target import TargetSet

__all__ = ["ScriptOptions", "check_options", "generate_script", "prepare"]

logger = logging.getLogger("hdlscript")

COMPILATION_MODES: Tuple[str, ...] = ("separate", "common")


@dataclass(frozen=True)
class ScriptOptions:
    """Every selector of the ``script`` command, already parsed."""

    targets: Tuple[str, ...] = ()
    no_default_target: bool = False
    relative_path: bool = False
    defines: Tuple[str, ...] = ()
    vcom_args: Tuple[str, ...] = ()
    vlog_args: Tuple[str, ...] = ()
    only_defines: bool = False
    only_includes: bool = False
    only_sources: bool = False
    no_simset: bool = False
    vlogan_bin: str = "vlogan"
    vhdlan_bin: str = "vhdlan"
    no_abort_on_error: bool = False
    compilation_mode: str = "separate"
    packages: Tuple[str, ...] = ()
    no_deps: bool = False
    excludes: Tuple[str, ...] = ()
    template: Optional[str] = None

    @property
    def filters_packages(self) -> bool:
        return bool(self.packages or self.excludes or self.no_deps)


def check_options(fmt: ScriptFormat, options: ScriptOptions) -> None:
    """Reject option combinations that are invalid for ``fmt``."""
    validate_options(
        fmt,
        vlog_args=options.vlog_args,
        vcom_args=options.vcom_args,
        only_defines=options.only_defines,
        only_includes=options.only_includes,
        only_sources=options.only_sources,
        no_simset=options.no_simset,
        relative_path=options.relative_path,
        template_path=options.template,
    )
    if options.compilation_mode not in COMPILATION_MODES:
        raise OptionConflictError(f"Unknown compilation mode: {options.compilation_mode!r}")


def prepare(
    sources: ResolvedSources,
    fmt: ScriptFormat,
    options: ScriptOptions,
) -> Tuple[TargetSet, Aggregate]:
    """Run the filter/flatten/aggregate stages and return the active targets
    and the (restricted) aggregate."""
    targets = TargetSet(options.targets).union(default_targets(fmt, options.no_default_target))
    logger.debug("Active targets: %s", list(targets))

    group = filter_targets_or_empty(sources.group, targets)

    if options.filters_packages:
        keep = resolve_package_list(
            group,
            options.packages,
            options.excludes,
            options.no_deps,
            sources.root_package,
        )
        group = filter_packages_or_empty(group, keep)

    groups = flatten(group)
    logger.debug("Flattened tree into %d group(s)", len(groups))

    cli_defines: List = [parse_define(d) for d in options.defines]
    agg = aggregate(groups, targets, cli_defines)
    agg = agg.restrict(options.only_defines, options.only_includes, options.only_sources)
    return targets, agg


def generate_script(
    sources: ResolvedSources,
    fmt: ScriptFormat,
    options: ScriptOptions,
    renderer: Optional[TemplateRenderer] = None,
) -> str:
    """Produce the script text for ``fmt`` from a resolved source tree.

    Raises
    ------
    OptionConflictError
        Before any processing, for options incompatible with ``fmt``.
    TemplateLoadError
        If the custom template of format ``template`` cannot be read.
    RenderError
        If the template engine rejects the template or the context.
    """
    check_options(fmt, options)

    template_source = None
    if fmt is ScriptFormat.TEMPLATE:
        template_source = load_custom_template(options.template)

    _, agg = prepare(sources, fmt, options)
    context = build_context(
        sources.root,
        agg,
        abort_on_error=not options.no_abort_on_error,
        vlog_args=options.vlog_args,
        vcom_args=options.vcom_args,
        vlogan_bin=options.vlogan_bin,
        vhdlan_bin=options.vhdlan_bin,
        relativize=options.relative_path,
        compilation_mode=options.compilation_mode,
        no_simset=options.no_simset,
    )
    return emit(fmt, context, template_source, renderer)
