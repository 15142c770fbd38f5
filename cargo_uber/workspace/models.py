"""Data models for the workspace scanner and rewriter."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cargo_uber.core.config import MANIFEST_NAME


@dataclass(frozen=True)
class ProjectRoot:
    """A top-level directory that was cloned on its own (holds ``.git``)."""

    path: Path
    rel_path: str


@dataclass
class MemberPackage:
    """A directory holding a Cargo.toml with a ``[package]`` table."""

    path: Path
    rel_path: str
    root: ProjectRoot
    name: str
    manifest: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def manifest_path(self) -> Path:
        return self.path / MANIFEST_NAME


class NodeKind(str, enum.Enum):
    PROJECT_ROOT = "project-root"
    MEMBER = "member"
    NEITHER = "neither"


@dataclass(frozen=True)
class ScanNode:
    """Classification of one visited directory."""

    kind: NodeKind
    path: Path
    manifest: dict[str, Any] | None = field(default=None, repr=False)


@dataclass
class ScanResult:
    """Everything one scan of the workspace discovered."""

    workspace: Path
    roots: list[ProjectRoot] = field(default_factory=list)
    packages: list[MemberPackage] = field(default_factory=list)
    excluded_roots: list[ProjectRoot] = field(default_factory=list)

    @property
    def members(self) -> list[str]:
        return sorted({p.rel_path for p in self.packages})

    @property
    def exclude(self) -> list[str]:
        return sorted({r.rel_path for r in self.excluded_roots})

    def packages_named(self, name: str) -> list[MemberPackage]:
        return [p for p in self.packages if p.name == name]

    def package_at(self, path: Path) -> MemberPackage | None:
        for pkg in self.packages:
            if pkg.path == path:
                return pkg
        return None


@dataclass(frozen=True)
class RemoteDescriptor:
    """Resolved remote identity of a project root."""

    url: str
    ref: str
    ref_kind: str  # "branch" | "rev"


@dataclass
class RewriteOutcome:
    """One dependency entry the rewriter touched or deliberately left alone."""

    package: str
    dependency: str
    table: str
    detail: str


@dataclass
class RewriteReport:
    """Summary of a mode-switch run."""

    mode: str
    rewritten: list[RewriteOutcome] = field(default_factory=list)
    skipped: list[RewriteOutcome] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    saved: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed
