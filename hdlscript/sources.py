# hdlscript/sources.py
"""
Source tree data model.

The tree handed over by the resolver is a :class:`SourceGroup` whose ``files``
are either plain :class:`File` entries or nested :class:`Group` entries (for
example a dependency package). The tree is treated as immutable input: every
pipeline stage builds new groups with :func:`dataclasses.replace` instead of
mutating the ones it was given.

Ordering of ``files`` is load-bearing (HDL compile order) and must survive
every transformation; stages may only remove or split.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    Dict,
    FrozenSet,
    Hashable,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from hdlscript.target import TargetSpec

__all__ = [
    "DefineMap",
    "File",
    "Group",
    "SourceFile",
    "SourceGroup",
    "ordered_unique",
]

T = TypeVar("T", bound=Hashable)

Define = Tuple[str, Optional[str]]


def ordered_unique(items: Iterable[T]) -> List[T]:
    """Deduplicate ``items`` keeping the position of the first occurrence."""
    return list(dict.fromkeys(items))


class DefineMap(Mapping[str, Optional[str]]):
    """Ordered macro map with case-insensitive keys and case-preserving names.

    Entries are stored under the case-folded name as ``(original name, value)``.
    Lookups always go through the folded key, so ``m["foo"]`` and ``m["FOO"]``
    hit the same entry, while iteration yields the names as first written.
    """

    __slots__ = ("_entries",)

    def __init__(
        self,
        defines: Union[None, Mapping[str, Optional[str]], Iterable[Define]] = None,
    ) -> None:
        self._entries: Dict[str, Define] = {}
        if defines is None:
            return
        pairs = defines.items() if isinstance(defines, Mapping) else defines
        for name, value in pairs:
            name = str(name)
            self._entries[name.casefold()] = (name, None if value is None else str(value))

    def __getitem__(self, name: str) -> Optional[str]:
        return self._entries[name.casefold()][1]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.casefold() in self._entries

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DefineMap):
            return self.as_pairs() == other.as_pairs()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self.as_pairs()))

    def __repr__(self) -> str:
        return f"DefineMap({self.as_pairs()!r})"

    def merged(self, child: "DefineMap") -> "DefineMap":
        """Return ``self`` overlaid with ``child``; child wins on a name collision.

        A shadowed entry keeps its original position but takes the child's
        spelling and value.
        """
        out = DefineMap()
        out._entries = dict(self._entries)
        out._entries.update(child._entries)
        return out

    def as_pairs(self) -> List[Define]:
        return list(self._entries.values())


@dataclass(frozen=True)
class File:
    """A single compilable source path."""

    path: Path

    @property
    def suffix(self) -> str:
        return self.path.suffix


@dataclass(frozen=True)
class Group:
    """A nested sub-tree inside a parent's file sequence."""

    group: "SourceGroup"


SourceFile = Union[File, Group]


@dataclass(frozen=True)
class SourceGroup:
    """One package's (or scope's) contribution to the source tree."""

    package: str = ""
    independent: bool = False
    target: TargetSpec = field(default_factory=TargetSpec.wildcard)
    include_dirs: Tuple[Path, ...] = ()
    export_incdirs: Tuple[Path, ...] = ()
    defines: DefineMap = field(default_factory=DefineMap)
    files: Tuple[SourceFile, ...] = ()
    dependencies: FrozenSet[str] = frozenset()
    version: Optional[str] = None

    @classmethod
    def empty(cls) -> "SourceGroup":
        """Fallback used when a filter removes the whole tree."""
        return cls(package="", independent=True, target=TargetSpec.wildcard())

    def get_incdirs(self) -> List[Path]:
        """Include dirs visible to this group, then its exported ones, deduplicated."""
        return ordered_unique(list(self.include_dirs) + list(self.export_incdirs))

    def iter_groups(self) -> Iterator["SourceGroup"]:
        """Pre-order walk over this group and every nested group."""
        yield self
        for entry in self.files:
            if isinstance(entry, Group):
                yield from entry.group.iter_groups()

    def packages(self) -> Dict[str, FrozenSet[str]]:
        """Map every (lowercased) package in the tree to its dependency names."""
        graph: Dict[str, set] = {}
        for grp in self.iter_groups():
            if not grp.package:
                continue
            deps = graph.setdefault(grp.package.lower(), set())
            deps.update(d.lower() for d in grp.dependencies)
        return {name: frozenset(deps) for name, deps in graph.items()}

    def leaf_files(self) -> List[Path]:
        """All file paths of the tree in pre-order, left to right."""
        out: List[Path] = []
        for entry in self.files:
            if isinstance(entry, File):
                out.append(entry.path)
            else:
                out.extend(entry.group.leaf_files())
        return out
