# hdlscript/categorize.py
"""
Split a flat group into homogeneous compile batches.

Many backends run a different compiler per language, so a group is cut into
maximal contiguous runs of one language. Runs are never merged across an
intervening run of another language: ``[a.sv, b.vhd, c.sv]`` gives three
batches. Files with an unknown extension take no part in batching.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from hdlscript.sources import File, SourceFile, SourceGroup

__all__ = ["SourceType", "Batch", "classify", "separate_files", "EXTENSIONS"]


class SourceType(Enum):
    """Source-language category of a file."""

    VERILOG = "verilog"
    VHDL = "vhdl"


#: Extension (without the dot) -> language category.
EXTENSIONS: Dict[str, SourceType] = {
    "sv": SourceType.VERILOG,
    "v": SourceType.VERILOG,
    "vp": SourceType.VERILOG,
    "vhd": SourceType.VHDL,
    "vhdl": SourceType.VHDL,
}


def classify(entry: SourceFile) -> Optional[SourceType]:
    """Category of ``entry`` from its extension; ``None`` for anything else."""
    if not isinstance(entry, File):
        return None
    return EXTENSIONS.get(entry.path.suffix[1:])


@dataclass(frozen=True)
class Batch:
    """A contiguous same-language run of files plus its group's configuration."""

    file_type: SourceType
    files: Tuple[Path, ...]
    defines: Tuple[Tuple[str, Optional[str]], ...]
    incdirs: Tuple[Path, ...]


def separate_files(
    group: SourceGroup,
    categorize: Callable[[SourceFile], Optional[SourceType]] = classify,
) -> List[Batch]:
    """Cut ``group.files`` into batches of one category each, in order."""
    defines = tuple(group.defines.as_pairs())
    incdirs = tuple(group.get_incdirs())
    batches: List[Batch] = []

    category: Optional[SourceType] = None
    run: List[Path] = []
    for entry in group.files:
        new_category = categorize(entry)
        if new_category is None:
            continue
        if run and new_category != category:
            batches.append(Batch(category, tuple(run), defines, incdirs))
            run = []
        run.append(entry.path)
        category = new_category

    if run:
        batches.append(Batch(category, tuple(run), defines, incdirs))
    return batches
