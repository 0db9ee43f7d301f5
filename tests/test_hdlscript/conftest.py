# tests/test_hdlscript/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from hdlscript.sources import DefineMap, File, Group, SourceGroup
from hdlscript.target import TargetSpec

#: Fake project root used by the in-memory trees.
ROOT = Path("/work/proj")


@pytest.fixture
def root() -> Path:
    return ROOT


@pytest.fixture
def f() -> Callable[[str], File]:
    """Factory: ``f("a.sv")`` -> ``File(/work/proj/a.sv)``."""
    return lambda name: File(ROOT / name)


@pytest.fixture
def grp() -> Callable[..., SourceGroup]:
    """Factory building a :class:`SourceGroup` from entries and keyword fields.

    Entries may be ``File``s, ``SourceGroup``s (wrapped into ``Group``) or
    plain strings (taken as file names under ROOT). ``target`` accepts a list
    of names; ``defines`` accepts a dict.
    """

    def _make(*entries, target=None, defines=None, incdirs=(), export=(), **kw) -> SourceGroup:
        files = []
        for e in entries:
            if isinstance(e, SourceGroup):
                files.append(Group(e))
            elif isinstance(e, str):
                files.append(File(ROOT / e))
            else:
                files.append(e)
        return SourceGroup(
            files=tuple(files),
            target=TargetSpec.wildcard() if target is None else TargetSpec.of(target),
            defines=DefineMap(defines or {}),
            include_dirs=tuple(ROOT / d for d in incdirs),
            export_incdirs=tuple(ROOT / d for d in export),
            **kw,
        )

    return _make


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[[str], Path]:
    """Write a manifest text into ``tmp_path/sources.yml`` and return its path."""

    def _write(text: str, name: str = "sources.yml") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
