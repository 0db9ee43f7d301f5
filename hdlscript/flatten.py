# hdlscript/flatten.py
"""
Order-preserving flattening of a source tree.

A nested :class:`Group` is expanded at the position it occupies in its
parent's file list. The parent's plain files before it become one flat group,
the nested group follows (with the parent's defines and include dirs merged
in, child values winning), and the parent's files after it become another flat
group. Groups that end up without files are not emitted.

The resolver guarantees the tree is finite and acyclic.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List

from hdlscript.sources import File, Group, SourceGroup, ordered_unique

__all__ = ["flatten", "inherit"]


def inherit(parent: SourceGroup, child: SourceGroup) -> SourceGroup:
    """Return ``child`` with ``parent``'s configuration merged underneath it."""
    return replace(
        child,
        include_dirs=tuple(ordered_unique(parent.include_dirs + child.include_dirs)),
        export_incdirs=tuple(ordered_unique(parent.export_incdirs + child.export_incdirs)),
        defines=parent.defines.merged(child.defines),
    )


def flatten(group: SourceGroup) -> List[SourceGroup]:
    """Expand ``group`` into a flat list of groups containing only plain files."""
    out: List[SourceGroup] = []
    _flatten_into(group, out)
    return out


def _flatten_into(group: SourceGroup, out: List[SourceGroup]) -> None:
    pending: List[File] = []

    def flush() -> None:
        if pending:
            out.append(replace(group, files=tuple(pending)))
            pending.clear()

    for entry in group.files:
        if isinstance(entry, Group):
            flush()
            _flatten_into(inherit(group, entry.group), out)
        else:
            pending.append(entry)
    flush()
