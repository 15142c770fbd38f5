"""Dependency rewriter — toggle sibling dependencies between path and git form."""

from __future__ import annotations

import structlog

from cargo_uber.exceptions import (
    AmbiguousDependencyError,
    RemoteResolutionError,
    UberError,
)
from cargo_uber.workspace.dependencies import (
    DependencyReference,
    PathReference,
    RemoteReference,
    apply_source,
    iter_references,
    resolve_path,
    to_path_reference,
    to_remote_reference,
)
from cargo_uber.workspace.manifest_io import load_document, save_document
from cargo_uber.workspace.models import (
    MemberPackage,
    RewriteOutcome,
    RewriteReport,
    ScanResult,
)
from cargo_uber.workspace.remote import RemoteResolver

log = structlog.get_logger("cargo_uber.rewriter")

LOCAL_PATH = "local-path"
GIT_REF = "git-ref"
MODES = (LOCAL_PATH, GIT_REF)


class DependencyRewriter:
    """Rewrite the manifests of every scanned member package.

    Each manifest is loaded, rewritten and saved on its own. A package that
    fails is recorded in the report and the run moves on to the next one.
    """

    def __init__(self, scan_result: ScanResult, resolver: RemoteResolver | None = None) -> None:
        self._scan = scan_result
        self._resolver = resolver or RemoteResolver()

    def run(self, mode: str) -> RewriteReport:
        if mode not in MODES:
            raise ValueError(f"unknown rewrite mode {mode!r}")

        report = RewriteReport(mode=mode)
        for package in self._scan.packages:
            try:
                changed = self._rewrite_package(package, mode, report)
            except UberError as e:
                log.error("rewriter.package_failed", package=package.rel_path, error=str(e))
                report.failed[package.rel_path] = str(e)
                continue
            if changed:
                report.saved.append(package.rel_path)

        log.info(
            "rewriter.done",
            mode=mode,
            rewritten=len(report.rewritten),
            skipped=len(report.skipped),
            failed=len(report.failed),
        )
        return report

    def _rewrite_package(self, package: MemberPackage, mode: str, report: RewriteReport) -> bool:
        manifest_path = package.manifest_path
        doc = load_document(manifest_path)

        # Rewrites only count once the manifest is on disk.
        pending = RewriteReport(mode=mode)
        changed = False
        for ref in list(iter_references(doc)):
            if mode == LOCAL_PATH and isinstance(ref.source, RemoteReference):
                changed |= self._to_local(package, ref, pending)
            elif mode == GIT_REF and isinstance(ref.source, PathReference):
                changed |= self._to_git(package, ref, ref.source, pending)
        report.skipped.extend(pending.skipped)

        if not changed:
            return False
        saved = save_document(manifest_path, doc)
        report.rewritten.extend(pending.rewritten)
        return saved

    # ── local-path ───────────────────────────────────────────────────────

    def _to_local(
        self, package: MemberPackage, ref: DependencyReference, report: RewriteReport
    ) -> bool:
        try:
            target = self._unique_package(ref.package)
        except AmbiguousDependencyError as e:
            self._skip(report, package, ref, str(e), ambiguous=True)
            return False
        if target is None or target.path == package.path:
            return False

        new_source = to_path_reference(package.path, target.path)
        apply_source(ref.container, ref.key, new_source)
        self._record(report, package, ref, f"path = {new_source.path}")
        return True

    def _unique_package(self, name: str) -> MemberPackage | None:
        candidates = self._scan.packages_named(name)
        if len(candidates) > 1:
            raise AmbiguousDependencyError(name, [c.rel_path for c in candidates])
        return candidates[0] if candidates else None

    # ── git-ref ──────────────────────────────────────────────────────────

    def _to_git(
        self,
        package: MemberPackage,
        ref: DependencyReference,
        source: PathReference,
        report: RewriteReport,
    ) -> bool:
        target = self._scan.package_at(resolve_path(package.path, source))
        if target is None:
            log.debug(
                "rewriter.path_outside_workspace",
                package=package.rel_path,
                dependency=ref.key,
                path=source.path,
            )
            return False
        if target.root == package.root:
            return False

        try:
            descriptor = self._resolver.resolve(target.root.path)
        except RemoteResolutionError as e:
            self._skip(report, package, ref, str(e))
            return False

        new_source = to_remote_reference(descriptor)
        apply_source(ref.container, ref.key, new_source)
        self._record(
            report, package, ref, f"git = {new_source.git} ({new_source.ref_kind} {new_source.ref})"
        )
        return True

    # ── reporting ────────────────────────────────────────────────────────

    @staticmethod
    def _record(
        report: RewriteReport, package: MemberPackage, ref: DependencyReference, detail: str
    ) -> None:
        log.info(
            "rewriter.rewritten",
            package=package.rel_path,
            dependency=ref.key,
            table=ref.table,
            detail=detail,
        )
        report.rewritten.append(
            RewriteOutcome(package=package.rel_path, dependency=ref.key, table=ref.table, detail=detail)
        )

    @staticmethod
    def _skip(
        report: RewriteReport,
        package: MemberPackage,
        ref: DependencyReference,
        reason: str,
        ambiguous: bool = False,
    ) -> None:
        log.warning(
            "rewriter.ambiguous" if ambiguous else "rewriter.skipped",
            package=package.rel_path,
            dependency=ref.key,
            reason=reason,
        )
        report.skipped.append(
            RewriteOutcome(package=package.rel_path, dependency=ref.key, table=ref.table, detail=reason)
        )


def rewrite(scan_result: ScanResult, mode: str, resolver: RemoteResolver | None = None) -> RewriteReport:
    """Rewrite every member manifest of *scan_result* into *mode*."""
    return DependencyRewriter(scan_result, resolver).run(mode)
