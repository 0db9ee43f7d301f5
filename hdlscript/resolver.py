# hdlscript/resolver.py
"""
Manifest-backed source resolver.

Dependency resolution itself happens elsewhere; this module only loads an
already-resolved source tree from a YAML (or JSON) manifest and turns it into
:class:`~hdlscript.sources.SourceGroup` objects. Gathering the tree is the one
asynchronous step of an invocation (:meth:`ManifestResolver.sources`).

Manifest layout
---------------
::

    root: /abs/project/root      # optional; defaults to the manifest's directory
    package: top                 # optional name of the root package
    sources:                     # the top-level group
      package: top
      target: "*"                # "*", a name, or a list of names
      include_dirs: [include]
      export_incdirs: []
      defines: {FOO: null, WIDTH: 8}   # null or true: bare define
      dependencies: [common_cells]
      version: 1.0.0
      independent: false
      files:
        - src/a.sv
        - group: {...}           # nested group, same keys

Relative paths are resolved against ``root`` and normalized lexically, so
``../x.sv`` points outside the root and ``a/../x.sv`` equals ``x.sv``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from hdlscript.errors import ManifestNotFoundError, ManifestParseError
from hdlscript.sources import DefineMap, File, Group, SourceFile, SourceGroup
from hdlscript.target import TargetSpec

__all__ = ["ResolvedSources", "ManifestResolver", "load_manifest", "parse_group"]

logger = logging.getLogger("hdlscript")

_GROUP_KEYS = frozenset(
    {
        "package",
        "independent",
        "target",
        "include_dirs",
        "export_incdirs",
        "defines",
        "files",
        "dependencies",
        "version",
    }
)


@dataclass(frozen=True)
class ResolvedSources:
    """What the resolver hands to the pipeline."""

    root: Path
    group: SourceGroup
    root_package: Optional[str] = None


def load_manifest(path: Union[str, Path]) -> Dict[str, Any]:
    """Read and parse the manifest at ``path`` into a mapping."""
    path = Path(path)
    if not path.exists():
        raise ManifestNotFoundError(f"Source manifest not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ManifestParseError(f"Error parsing {path.name}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestParseError(f"Cannot read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestParseError(f"{path.name} must parse to a mapping (YAML object).")
    logger.debug("Loaded manifest from %s with keys: %s", path, list(data.keys()))
    return data


def _path_list(value: Any, root: Path, what: str) -> tuple:
    if value is None:
        return ()
    if isinstance(value, (str, Path)):
        value = [value]
    if not isinstance(value, list):
        raise ManifestParseError(f"'{what}' must be a list of paths.")
    return tuple(_resolve(p, root) for p in value)


def _resolve(path: Any, root: Path) -> Path:
    p = Path(str(path))
    if not p.is_absolute():
        p = root / p
    # lexical only: "../b.sv" must leave the root, symlinks are kept
    return Path(os.path.normpath(p))


def _define_value(name: Any, value: Any) -> Optional[str]:
    """Manifest define value -> text; ``true`` means a bare define."""
    if value is None or value is True:
        return None
    if value is False or not isinstance(value, (str, int, float)):
        raise ManifestParseError(
            f"Define '{name}' must have a string or number value (or true/null), got {value!r}."
        )
    return str(value)


def _defines(value: Any) -> DefineMap:
    if value is None:
        return DefineMap()
    if isinstance(value, Mapping):
        return DefineMap((name, _define_value(name, val)) for name, val in value.items())
    if isinstance(value, list):
        pairs = []
        for item in value:
            name, sep, val = str(item).partition("=")
            pairs.append((name.strip(), val.strip() if sep else None))
        return DefineMap(pairs)
    raise ManifestParseError("'defines' must be a mapping or a list of NAME[=VALUE].")


def _file_entry(entry: Any, root: Path) -> SourceFile:
    if isinstance(entry, Mapping):
        if "group" in entry:
            return Group(parse_group(entry["group"], root))
        if "file" in entry:
            return File(_resolve(entry["file"], root))
        raise ManifestParseError(f"File entry must be a path, 'file:' or 'group:': {entry!r}")
    return File(_resolve(entry, root))


def parse_group(data: Any, root: Path) -> SourceGroup:
    """Build a :class:`SourceGroup` (recursively) from manifest data."""
    if not isinstance(data, Mapping):
        raise ManifestParseError(f"A source group must be a mapping, got {type(data).__name__}.")
    unknown = set(data) - _GROUP_KEYS
    if unknown:
        raise ManifestParseError(f"Unknown source group key(s): {', '.join(sorted(unknown))}")

    files: List[SourceFile] = [_file_entry(e, root) for e in (data.get("files") or [])]
    version = data.get("version")
    return SourceGroup(
        package=str(data.get("package") or ""),
        independent=bool(data.get("independent", False)),
        target=TargetSpec.parse(data.get("target")),
        include_dirs=_path_list(data.get("include_dirs"), root, "include_dirs"),
        export_incdirs=_path_list(data.get("export_incdirs"), root, "export_incdirs"),
        defines=_defines(data.get("defines")),
        files=tuple(files),
        dependencies=frozenset(str(d) for d in (data.get("dependencies") or [])),
        version=None if version is None else str(version),
    )


class ManifestResolver:
    """Resolver reading an already-resolved tree from a manifest file."""

    def __init__(self, manifest: Union[str, Path]) -> None:
        self.manifest = Path(manifest)

    async def sources(self) -> ResolvedSources:
        """Gather the source tree (single suspend point of an invocation)."""
        data = load_manifest(self.manifest)
        root = Path(str(data.get("root") or self.manifest.resolve().parent))
        if not root.is_absolute():
            root = self.manifest.resolve().parent / root
        root = Path(os.path.normpath(root))
        group = parse_group(data.get("sources") or {}, root)
        root_package = data.get("package") or (group.package or None)
        logger.debug(
            "Resolved %d group(s) under %s (root package: %s)",
            sum(1 for _ in group.iter_groups()),
            root,
            root_package,
        )
        return ResolvedSources(root=root, group=group, root_package=root_package)
