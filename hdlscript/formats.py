# hdlscript/formats.py
"""
Backend formats, their implied targets, and option compatibility.

Design goals
------------
- Single source of truth for the list of formats (the CLI derives its
  ``click.Choice`` from :class:`ScriptFormat`).
- Deterministic ordering of the default targets of each format.
- Reject backend-restricted options *before* any processing happens.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence

from hdlscript.errors import OptionConflictError, UnknownFormatError

__all__ = [
    "ScriptFormat",
    "FORMAT_TARGETS",
    "TEMPLATE_FILES",
    "SIMULATOR_FORMATS",
    "VIVADO_FORMATS",
    "FLIST_FORMATS",
    "default_targets",
    "validate_options",
]


class ScriptFormat(Enum):
    """Enumerated, supported output formats."""

    FLIST = "flist"
    VSIM = "vsim"
    VCS = "vcs"
    VERILATOR = "verilator"
    SYNOPSYS = "synopsys"
    FORMALITY = "formality"
    RIVIERA = "riviera"
    GENUS = "genus"
    VIVADO = "vivado"
    VIVADO_SIM = "vivado-sim"
    PRECISION = "precision"
    TEMPLATE = "template"
    TEMPLATE_JSON = "template_json"

    @staticmethod
    def get(spec) -> "ScriptFormat":
        """Get the format given either as enum member or as its string value."""
        if isinstance(spec, (ScriptFormat, str)):
            return ScriptFormat(spec)
        raise TypeError(f"Invalid format specifier: {spec!r}")

    @classmethod
    def names(cls) -> List[str]:
        return [f.value for f in cls]


_VIVADO_TARGETS: List[str] = ["vivado", "fpga", "xilinx"]

#: Targets implicitly activated by each format (unless ``--no-default-target``).
FORMAT_TARGETS: Dict[ScriptFormat, List[str]] = {
    ScriptFormat.FLIST: ["flist"],
    ScriptFormat.VSIM: ["vsim", "simulation"],
    ScriptFormat.VCS: ["vcs", "simulation"],
    ScriptFormat.VERILATOR: ["verilator", "synthesis"],
    ScriptFormat.SYNOPSYS: ["synopsys", "synthesis"],
    ScriptFormat.FORMALITY: ["synopsys", "synthesis", "formality"],
    ScriptFormat.RIVIERA: ["riviera", "simulation"],
    ScriptFormat.GENUS: ["genus", "synthesis"],
    ScriptFormat.VIVADO: _VIVADO_TARGETS + ["synthesis"],
    ScriptFormat.VIVADO_SIM: _VIVADO_TARGETS + ["simulation"],
    ScriptFormat.PRECISION: ["precision", "fpga", "synthesis"],
    ScriptFormat.TEMPLATE: [],
    ScriptFormat.TEMPLATE_JSON: [],
}

#: Built-in template file (under ``hdlscript/templates``) for each format.
#: ``template`` and ``template_json`` have no built-in file.
TEMPLATE_FILES: Dict[ScriptFormat, str] = {
    ScriptFormat.FLIST: "flist.j2",
    ScriptFormat.VSIM: "vsim.tcl.j2",
    ScriptFormat.VCS: "vcs.sh.j2",
    ScriptFormat.VERILATOR: "verilator.sh.j2",
    ScriptFormat.SYNOPSYS: "synopsys.tcl.j2",
    ScriptFormat.FORMALITY: "formality.tcl.j2",
    ScriptFormat.RIVIERA: "riviera.tcl.j2",
    ScriptFormat.GENUS: "genus.tcl.j2",
    ScriptFormat.VIVADO: "vivado.tcl.j2",
    ScriptFormat.VIVADO_SIM: "vivado.tcl.j2",
    ScriptFormat.PRECISION: "precision.tcl.j2",
}

_CUSTOM: FrozenSet[ScriptFormat] = frozenset({ScriptFormat.TEMPLATE, ScriptFormat.TEMPLATE_JSON})

#: Formats accepting ``--vlog-arg`` / ``--vcom-arg``.
SIMULATOR_FORMATS: FrozenSet[ScriptFormat] = frozenset(
    {ScriptFormat.VSIM, ScriptFormat.VCS, ScriptFormat.RIVIERA}
) | _CUSTOM

#: Formats accepting ``--only-*`` and ``--no-simset``.
VIVADO_FORMATS: FrozenSet[ScriptFormat] = frozenset(
    {ScriptFormat.VIVADO, ScriptFormat.VIVADO_SIM}
) | _CUSTOM

#: Formats accepting ``--relative-path``.
FLIST_FORMATS: FrozenSet[ScriptFormat] = frozenset({ScriptFormat.FLIST}) | _CUSTOM


def default_targets(fmt: ScriptFormat, no_default_target: bool = False) -> List[str]:
    """Target names implied by ``fmt`` (empty with ``no_default_target``)."""
    if no_default_target:
        return []
    try:
        return list(FORMAT_TARGETS[fmt])
    except KeyError as exc:  # pragma: no cover - every enum member is mapped
        raise UnknownFormatError(f"Unknown format: {fmt!r}") from exc


def validate_options(
    fmt: ScriptFormat,
    *,
    vlog_args: Sequence[str] = (),
    vcom_args: Sequence[str] = (),
    only_defines: bool = False,
    only_includes: bool = False,
    only_sources: bool = False,
    no_simset: bool = False,
    relative_path: bool = False,
    template_path: Optional[str] = None,
) -> None:
    """Reject options that make no sense for ``fmt``.

    Raises
    ------
    OptionConflictError
        On the first incompatible option found.
    """
    if (vlog_args or vcom_args) and fmt not in SIMULATOR_FORMATS:
        raise OptionConflictError(
            "vsim/vcs-only options can only be used for 'vcs', 'vsim' or 'riviera' format!"
        )
    if (only_defines or only_includes or only_sources or no_simset) and fmt not in VIVADO_FORMATS:
        raise OptionConflictError(
            "Vivado-only options can only be used for 'vivado' or 'vivado-sim' format!"
        )
    if relative_path and fmt not in FLIST_FORMATS:
        raise OptionConflictError("--relative-path can only be used for 'flist' format!")
    if fmt is ScriptFormat.TEMPLATE and not template_path:
        raise OptionConflictError("Format 'template' requires --template <path>.")
