# hdlscript/filters.py
"""
Tree pruning by target and by package selection.

Both filters return a *new* tree (or ``None`` when the top-level group itself
is pruned). The ``*_or_empty`` wrappers substitute
:meth:`SourceGroup.empty` so downstream stages always receive a valid group.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import AbstractSet, Iterable, List, Optional

from hdlscript.sources import Group, SourceFile, SourceGroup, ordered_unique
from hdlscript.target import TargetSet

__all__ = [
    "filter_targets",
    "filter_targets_or_empty",
    "normalize_packages",
    "resolve_package_list",
    "filter_packages",
    "filter_packages_or_empty",
]

logger = logging.getLogger("hdlscript")


# ---------------------------------------------------------------------------
# Target filter
# ---------------------------------------------------------------------------

def filter_targets(group: SourceGroup, targets: TargetSet) -> Optional[SourceGroup]:
    """Keep only the parts of ``group`` whose target matches ``targets``.

    A group with a non-matching target is dropped together with its subtree.
    Nested groups are filtered recursively; plain files are kept in place.
    """
    if not group.target.matches(targets):
        return None

    files = []
    for entry in group.files:
        if isinstance(entry, Group):
            sub = filter_targets(entry.group, targets)
            if sub is not None:
                files.append(Group(sub))
        else:
            files.append(entry)
    return replace(group, files=tuple(files))


def filter_targets_or_empty(group: SourceGroup, targets: TargetSet) -> SourceGroup:
    filtered = filter_targets(group, targets)
    if filtered is None:
        logger.debug("Target filter %s removed the whole tree", list(targets))
        return SourceGroup.empty()
    return filtered


# ---------------------------------------------------------------------------
# Package filter
# ---------------------------------------------------------------------------

def normalize_packages(names: Iterable[str]) -> List[str]:
    """Lowercase and deduplicate package names, first occurrence wins."""
    return ordered_unique(str(n).strip().lower() for n in names if str(n).strip())


def resolve_package_list(
    group: SourceGroup,
    packages: Iterable[str] = (),
    excludes: Iterable[str] = (),
    no_deps: bool = False,
    root_package: Optional[str] = None,
) -> List[str]:
    """Compute the ordered set of package names to keep.

    Parameters
    ----------
    group
        Source tree; its ``dependencies`` fields provide the dependency graph.
    packages
        Allow-list. When empty, the root package is the seed (or every package
        in the tree when the root package is unknown).
    excludes
        Deny-list, subtracted last regardless of how a package got in.
    no_deps
        Do not add the transitive dependency closure of the seed.
    root_package
        Name of the package the session was started in.
    """
    graph = group.packages()
    allow = normalize_packages(packages)
    deny = set(normalize_packages(excludes))

    if allow:
        seed = allow
    elif root_package:
        seed = normalize_packages([root_package])
    else:
        seed = list(graph)

    result = list(seed)
    if not no_deps:
        stack = list(reversed(seed))
        seen = set(seed)
        while stack:
            pkg = stack.pop()
            for dep in sorted(graph.get(pkg, ())):
                if dep not in seen:
                    seen.add(dep)
                    result.append(dep)
                    stack.append(dep)

    keep = [pkg for pkg in result if pkg not in deny]
    logger.debug("Resolved package list: %s", keep)
    return keep


def _is_selected(group: SourceGroup, keep: AbstractSet[str]) -> bool:
    return not group.package or group.package.lower() in keep


def _select(group: SourceGroup, keep: AbstractSet[str]) -> List[SourceFile]:
    """Entries standing in for ``group`` inside its parent's file list.

    A selected group yields itself with its entries filtered. An unselected
    group yields only the selected groups nested below it, lifted to its
    position; its own files, defines and include dirs are dropped.
    """
    entries: List[SourceFile] = []
    for entry in group.files:
        if isinstance(entry, Group):
            entries.extend(_select(entry.group, keep))
        else:
            entries.append(entry)

    if not _is_selected(group, keep):
        return [e for e in entries if isinstance(e, Group)]
    return [Group(replace(group, files=tuple(entries)))]


def filter_packages(group: SourceGroup, keep: AbstractSet[str]) -> Optional[SourceGroup]:
    """Drop every group whose package is not in ``keep``.

    ``keep`` holds lowercase names. Groups without a package (the anonymous
    top-level scope) are always kept. Selected packages nested under a dropped
    one survive, moved up to the dropped group's place; when that is the
    top-level group they are gathered under an anonymous top-level group.
    Returns ``None`` when nothing is selected.
    """
    entries = _select(group, keep)
    if _is_selected(group, keep):
        return entries[0].group
    if not entries:
        return None
    return replace(SourceGroup.empty(), files=tuple(entries))


def filter_packages_or_empty(group: SourceGroup, keep: Iterable[str]) -> SourceGroup:
    filtered = filter_packages(group, frozenset(keep))
    if filtered is None:
        logger.debug("Package filter removed the whole tree")
        return SourceGroup.empty()
    return filtered
