"""Workspace engine — scan cloned roots, write the parent manifest, rewrite deps."""

from cargo_uber.workspace.models import (
    MemberPackage,
    ProjectRoot,
    RemoteDescriptor,
    RewriteReport,
    ScanResult,
)
from cargo_uber.workspace.remote import RemoteResolver
from cargo_uber.workspace.rewriter import GIT_REF, LOCAL_PATH, DependencyRewriter, rewrite
from cargo_uber.workspace.scanner import DirectoryScanner, scan
from cargo_uber.workspace.writer import WorkspaceManifestWriter, write_workspace

__all__ = [
    "GIT_REF",
    "LOCAL_PATH",
    "DependencyRewriter",
    "DirectoryScanner",
    "MemberPackage",
    "ProjectRoot",
    "RemoteDescriptor",
    "RemoteResolver",
    "RewriteReport",
    "ScanResult",
    "WorkspaceManifestWriter",
    "rewrite",
    "scan",
    "write_workspace",
]
