"""Dependency sources: the ``path`` form and the ``git`` form of a Cargo dependency.

A dependency entry is a :class:`DependencyReference` only when its source is
exactly one of the two shapes. Plain version strings, registry tables and
entries that mix ``path`` with ``git`` are not references and are never
rewritten.
"""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Union

import tomlkit
from tomlkit.items import Table

from cargo_uber.workspace.models import RemoteDescriptor

_DEP_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")

_REF_KEYS = ("branch", "rev", "tag")
_SOURCE_KEYS = ("path", "git") + _REF_KEYS


@dataclass(frozen=True)
class PathReference:
    path: str

    def fields(self) -> list[tuple[str, str]]:
        return [("path", self.path)]


@dataclass(frozen=True)
class RemoteReference:
    git: str
    ref_kind: str | None = None  # "branch" | "rev" | "tag"
    ref: str | None = None

    def fields(self) -> list[tuple[str, str]]:
        out = [("git", self.git)]
        if self.ref_kind and self.ref:
            out.append((self.ref_kind, self.ref))
        return out


DependencySource = Union[PathReference, RemoteReference]


@dataclass
class DependencyReference:
    """A dependency entry whose source is a path or a git remote."""

    table: str  # dotted location, e.g. "dependencies" or "target.'cfg(unix)'.dev-dependencies"
    key: str
    package: str
    source: DependencySource
    container: Any  # the tomlkit table holding ``key``


def parse_source(entry: Any) -> DependencySource | None:
    """Return the source of a dependency entry, or None when it has neither shape."""
    if not isinstance(entry, dict):
        return None
    has_path = "path" in entry
    has_git = "git" in entry
    if has_path == has_git:
        return None
    if has_path:
        return PathReference(path=str(entry["path"]))
    refs = [k for k in _REF_KEYS if k in entry]
    if len(refs) > 1:
        return None
    if refs:
        return RemoteReference(git=str(entry["git"]), ref_kind=refs[0], ref=str(entry[refs[0]]))
    return RemoteReference(git=str(entry["git"]))


def normalize_path(path: str) -> str:
    """Canonical POSIX spelling of a relative dependency path."""
    return posixpath.normpath(path.replace("\\", "/"))


def to_path_reference(from_dir: Path, target_dir: Path) -> PathReference:
    """Path reference from a package directory to another package directory."""
    return PathReference(path=normalize_path(os.path.relpath(target_dir, from_dir)))


def to_remote_reference(descriptor: RemoteDescriptor) -> RemoteReference:
    return RemoteReference(git=descriptor.url, ref_kind=descriptor.ref_kind, ref=descriptor.ref)


def resolve_path(from_dir: Path, ref: PathReference) -> Path:
    """Absolute, normalized directory a path reference points at (symlinks untouched)."""
    return Path(os.path.normpath(from_dir / ref.path))


def _plain(value: Any) -> Any:
    return value.unwrap() if hasattr(value, "unwrap") else value


def apply_source(container: Any, key: str, source: DependencySource) -> None:
    """Replace the source of ``container[key]`` with *source*.

    Source keys are written first, then every other key of the entry in its
    original order. Inline tables are rebuilt and swapped in place so the
    entry keeps its position; ``[dependencies.foo]`` tables are edited in place.
    """
    entry = container[key]
    rest = [(k, _plain(entry[k])) for k in list(entry.keys()) if k not in _SOURCE_KEYS]

    if isinstance(entry, Table):
        for k in list(entry.keys()):
            del entry[k]
        for k, v in source.fields():
            entry[k] = v
        for k, v in rest:
            entry[k] = v
        return

    table = tomlkit.inline_table()
    for k, v in source.fields():
        table[k] = v
    for k, v in rest:
        table[k] = v
    container[key] = table


def _dependency_tables(doc: Any) -> Iterator[tuple[str, Any]]:
    for section in _DEP_SECTIONS:
        table = doc.get(section)
        if isinstance(table, dict):
            yield section, table
    targets = doc.get("target")
    if isinstance(targets, dict):
        for cfg, body in targets.items():
            if not isinstance(body, dict):
                continue
            for section in _DEP_SECTIONS:
                table = body.get(section)
                if isinstance(table, dict):
                    yield f"target.{cfg}.{section}", table


def iter_references(doc: Any) -> Iterator[DependencyReference]:
    """Yield every path or git dependency of a manifest document."""
    for location, table in _dependency_tables(doc):
        for key in list(table.keys()):
            entry = table[key]
            source = parse_source(entry)
            if source is None:
                continue
            package = entry.get("package", key)
            yield DependencyReference(
                table=location,
                key=str(key),
                package=str(package),
                source=source,
                container=table,
            )
