# hdlscript/target.py
"""
Target applicability for source groups.

A :class:`TargetSet` is what the caller wants active (e.g. ``{"vsim",
"simulation"}``); a :class:`TargetSpec` is what a group declares it applies to.
A wildcard spec applies to every target set, including the empty one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Iterator, Optional, Tuple, Union

__all__ = ["TargetSet", "TargetSpec", "WILDCARD_TOKENS"]

#: Manifest spellings that mean "applies to every target".
WILDCARD_TOKENS: FrozenSet[str] = frozenset({"*", "all"})


class TargetSet:
    """Ordered, deduplicated, case-sensitive set of active target names."""

    __slots__ = ("_names",)

    def __init__(self, names: Iterable[str] = ()) -> None:
        seen = {}
        for name in names:
            seen.setdefault(str(name), None)
        self._names: Tuple[str, ...] = tuple(seen)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TargetSet):
            return NotImplemented
        return set(self._names) == set(other._names)

    def __hash__(self) -> int:
        return hash(frozenset(self._names))

    def __repr__(self) -> str:
        return f"TargetSet({list(self._names)!r})"

    def union(self, names: Iterable[str]) -> "TargetSet":
        """Return a new set with ``names`` appended (existing order kept)."""
        return TargetSet(list(self._names) + list(names))

    def isdisjoint(self, names: Iterable[str]) -> bool:
        return not any(name in self._names for name in names)


@dataclass(frozen=True)
class TargetSpec:
    """Applicability rule of a source group.

    ``names is None`` means wildcard; otherwise the group applies only when at
    least one of ``names`` is active.
    """

    names: Optional[FrozenSet[str]] = None

    @classmethod
    def wildcard(cls) -> "TargetSpec":
        return cls(None)

    @classmethod
    def of(cls, names: Iterable[str]) -> "TargetSpec":
        return cls(frozenset(str(n) for n in names))

    @classmethod
    def parse(cls, value: Union[None, str, Iterable[str]]) -> "TargetSpec":
        """Build a spec from manifest data (``None``, ``"*"``, a name or a list)."""
        if value is None:
            return cls.wildcard()
        if isinstance(value, str):
            if value.strip() in WILDCARD_TOKENS:
                return cls.wildcard()
            return cls.of([value.strip()])
        names = [str(v).strip() for v in value]
        if any(n in WILDCARD_TOKENS for n in names):
            return cls.wildcard()
        return cls.of(names)

    @property
    def is_wildcard(self) -> bool:
        return self.names is None

    def matches(self, targets: TargetSet) -> bool:
        """True if this spec applies under the active ``targets``."""
        if self.names is None:
            return True
        return not targets.isdisjoint(self.names)

    def to_data(self) -> Union[str, list]:
        if self.names is None:
            return "*"
        return sorted(self.names)
