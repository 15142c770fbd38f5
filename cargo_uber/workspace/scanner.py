"""Directory scanner — discover project roots and their member packages."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import structlog

from cargo_uber.core.config import MANIFEST_NAME
from cargo_uber.exceptions import UberError, WorkspaceError
from cargo_uber.workspace.manifest_io import read_manifest
from cargo_uber.workspace.models import (
    MemberPackage,
    NodeKind,
    ProjectRoot,
    ScanNode,
    ScanResult,
)

log = structlog.get_logger("cargo_uber.scanner")

# Build output never holds members; target/package/ contains packaged copies.
_SKIP_DIRS = {"target", "node_modules", "__pycache__"}


def _rel(workspace: Path, path: Path) -> str:
    return path.relative_to(workspace).as_posix()


def _has_vcs_metadata(path: Path) -> bool:
    # .git is a directory in a plain clone and a file in worktrees/submodules
    marker = path / ".git"
    return os.path.isdir(marker) or os.path.isfile(marker)


def _is_package(manifest: dict) -> bool:
    return isinstance(manifest.get("package"), dict)


def _subdirs(path: Path) -> Iterator[Path]:
    """Yield walkable child directories in name order. Symlinks are never followed."""
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if entry.name.startswith(".") or entry.name in _SKIP_DIRS:
            continue
        try:
            if entry.is_dir(follow_symlinks=False):
                yield Path(entry.path)
        except OSError:
            continue


def classify(path: Path, top_level: bool = False) -> ScanNode:
    """Classify a single directory.

    Top-level directories are project roots when they hold git metadata.
    Anything else is a member when it holds a Cargo.toml with ``[package]``.
    A manifest that cannot be read or parsed yields ``NEITHER``.
    """
    if top_level:
        kind = NodeKind.PROJECT_ROOT if _has_vcs_metadata(path) else NodeKind.NEITHER
        return ScanNode(kind=kind, path=path)

    manifest_path = path / MANIFEST_NAME
    if not os.path.isfile(manifest_path):
        return ScanNode(kind=NodeKind.NEITHER, path=path)
    try:
        manifest = read_manifest(manifest_path)
    except UberError as e:
        log.warning("scanner.manifest_unreadable", path=str(manifest_path), error=str(e))
        return ScanNode(kind=NodeKind.NEITHER, path=path, manifest={})
    if not _is_package(manifest):
        log.debug("scanner.not_a_package", path=str(manifest_path))
        return ScanNode(kind=NodeKind.NEITHER, path=path, manifest=manifest)
    return ScanNode(kind=NodeKind.MEMBER, path=path, manifest=manifest)


class DirectoryScanner:
    """Walk a workspace directory and classify what it finds."""

    def __init__(self, workspace: Path) -> None:
        self.workspace = Path(os.path.abspath(workspace))

    def scan(self) -> ScanResult:
        if not self.workspace.is_dir():
            raise WorkspaceError(f"Workspace root is not a directory: {self.workspace}")
        try:
            top_dirs = list(_subdirs(self.workspace))
        except OSError as e:
            raise WorkspaceError(f"Cannot read workspace root {self.workspace}: {e}") from e

        result = ScanResult(workspace=self.workspace)
        for top in top_dirs:
            node = classify(top, top_level=True)
            if node.kind is not NodeKind.PROJECT_ROOT:
                log.debug("scanner.not_a_root", path=str(top))
                continue
            root = ProjectRoot(path=top, rel_path=_rel(self.workspace, top))
            result.roots.append(root)
            self._scan_root(root, result)

        result.packages.sort(key=lambda p: p.rel_path)
        log.info(
            "scanner.done",
            roots=len(result.roots),
            members=len(result.members),
            excluded=len(result.exclude),
        )
        return result

    def _scan_root(self, root: ProjectRoot, result: ScanResult) -> None:
        nested: list[MemberPackage] = []
        try:
            children = list(_subdirs(root.path))
        except OSError as e:
            log.warning("scanner.unreadable_dir", path=str(root.path), error=str(e))
            children = []
        for child in children:
            nested.extend(self._walk(child, root))

        if nested:
            result.packages.extend(nested)
            result.excluded_roots.append(root)
            return

        # A root with no nested members may itself be a single package.
        own = classify(root.path)
        if own.kind is NodeKind.MEMBER:
            result.packages.append(self._member(own, root))

    def _walk(self, path: Path, root: ProjectRoot) -> list[MemberPackage]:
        """Descend until a manifest is found; the first manifest ends the branch."""
        found: list[MemberPackage] = []
        stack = [path]
        while stack:
            current = stack.pop()
            node = classify(current)
            if node.kind is NodeKind.MEMBER:
                found.append(self._member(node, root))
                continue
            if node.manifest is not None:
                # A manifest without [package] still terminates the branch.
                continue
            try:
                children = list(_subdirs(current))
            except OSError as e:
                log.warning("scanner.unreadable_dir", path=str(current), error=str(e))
                continue
            stack.extend(reversed(children))
        return found

    def _member(self, node: ScanNode, root: ProjectRoot) -> MemberPackage:
        manifest = node.manifest or {}
        name = manifest.get("package", {}).get("name") or node.path.name
        return MemberPackage(
            path=node.path,
            rel_path=_rel(self.workspace, node.path),
            root=root,
            name=str(name),
            manifest=manifest,
        )


def scan(workspace: Path) -> ScanResult:
    """Scan *workspace* for project roots and member packages."""
    return DirectoryScanner(workspace).scan()
