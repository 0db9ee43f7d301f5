# hdlscript/aggregate.py
"""
Global aggregation across the flattened groups.

Everything here is an explicit fold over the flattened group sequence (and the
batches cut from it); no module-level state is accumulated.

Define precedence
-----------------
A batch's effective define list is the global defines followed by its group's
own defines. The two lists are concatenated as-is: a name may appear twice
with different values, and the backend tool's own last-wins/first-wins rule
decides. This is passed through untouched on purpose.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from hdlscript.categorize import SourceType, separate_files
from hdlscript.sources import SourceGroup, ordered_unique
from hdlscript.target import TargetSet

__all__ = [
    "Define",
    "SourceBatch",
    "Aggregate",
    "parse_define",
    "global_defines",
    "aggregate",
]

logger = logging.getLogger("hdlscript")

Define = Tuple[str, Optional[str]]


def parse_define(text: str) -> Define:
    """Parse ``NAME`` or ``NAME=VALUE`` (both sides trimmed)."""
    name, sep, value = text.partition("=")
    return name.strip(), (value.strip() if sep else None)


def _define_sort_key(define: Define) -> Tuple[str, bool, str]:
    name, value = define
    return name, value is not None, value or ""


def global_defines(targets: TargetSet, cli_defines: Iterable[Define] = ()) -> List[Define]:
    """``TARGET_<NAME>`` per active target plus CLI defines, sorted by name."""
    defines: List[Define] = [(f"TARGET_{t.upper()}", None) for t in targets]
    defines.extend(cli_defines)
    return sorted(defines, key=_define_sort_key)


@dataclass(frozen=True)
class SourceBatch:
    """One compile invocation in ``separate`` mode."""

    file_type: SourceType
    files: Tuple[Path, ...]
    defines: Tuple[Define, ...]
    incdirs: Tuple[Path, ...]


@dataclass(frozen=True)
class Aggregate:
    global_defines: Tuple[Define, ...] = ()
    all_defines: Tuple[Define, ...] = ()
    all_incdirs: Tuple[Path, ...] = ()
    all_files: Tuple[Path, ...] = ()
    all_verilog: Tuple[Path, ...] = ()
    all_vhdl: Tuple[Path, ...] = ()
    srcs: Tuple[SourceBatch, ...] = field(default_factory=tuple)

    def restrict(
        self,
        only_defines: bool = False,
        only_includes: bool = False,
        only_sources: bool = False,
    ) -> "Aggregate":
        """Clear the aggregate categories not selected by the ``only_*`` flags.

        The flags may be combined; with none set the aggregate is unchanged.
        """
        keep_defines = not (only_includes or only_sources)
        keep_incdirs = not (only_defines or only_sources)
        keep_sources = not (only_defines or only_includes)
        return replace(
            self,
            all_defines=self.all_defines if keep_defines else (),
            all_incdirs=self.all_incdirs if keep_incdirs else (),
            all_files=self.all_files if keep_sources else (),
            all_verilog=self.all_verilog if keep_sources else (),
            all_vhdl=self.all_vhdl if keep_sources else (),
            srcs=self.srcs if keep_sources else (),
        )


def aggregate(
    groups: Sequence[SourceGroup],
    targets: TargetSet,
    cli_defines: Iterable[Define] = (),
) -> Aggregate:
    """Fold the flattened ``groups`` into the global context aggregates."""
    defines = global_defines(targets, cli_defines)

    all_defines: List[Define] = list(defines)
    all_incdirs: List[Path] = []
    all_files: List[Path] = []
    for group in groups:
        all_defines.extend(group.defines.as_pairs())
        all_incdirs.extend(group.get_incdirs())
        all_files.extend(group.leaf_files())

    srcs: List[SourceBatch] = []
    for group in groups:
        for batch in separate_files(group):
            srcs.append(
                SourceBatch(
                    file_type=batch.file_type,
                    files=batch.files,
                    defines=tuple(defines) + batch.defines,
                    incdirs=batch.incdirs,
                )
            )

    all_verilog = [f for b in srcs if b.file_type is SourceType.VERILOG for f in b.files]
    all_vhdl = [f for b in srcs if b.file_type is SourceType.VHDL for f in b.files]

    logger.debug("Aggregated %d group(s) into %d batch(es)", len(groups), len(srcs))
    return Aggregate(
        global_defines=tuple(defines),
        all_defines=tuple(all_defines),
        all_incdirs=tuple(ordered_unique(all_incdirs)),
        all_files=tuple(ordered_unique(all_files)),
        all_verilog=tuple(ordered_unique(all_verilog)),
        all_vhdl=tuple(ordered_unique(all_vhdl)),
        srcs=tuple(srcs),
    )
