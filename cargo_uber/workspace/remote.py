"""Remote resolver — read a project root's upstream URL and current ref from git."""

from __future__ import annotations

import subprocess
from pathlib import Path

import structlog

from cargo_uber.core.config import UPSTREAM_REMOTE, Settings
from cargo_uber.exceptions import (
    RemoteNotConfiguredError,
    RemoteResolutionError,
    UnresolvableRefError,
)
from cargo_uber.workspace.models import RemoteDescriptor

log = structlog.get_logger("cargo_uber.remote")


def _git(root: Path, *args: str, timeout: float = 5.0) -> str | None:
    """Run a read-only git query in *root*.

    Returns stripped stdout, or None when git exits non-zero.
    Raises RemoteResolutionError when git cannot be run at all.
    """
    try:
        result = subprocess.run(
            ["git", "-C", str(root), *args],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise RemoteResolutionError("git executable not found") from e
    except subprocess.SubprocessError as e:
        raise RemoteResolutionError(f"git {' '.join(args)} failed in {root}: {e}") from e
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


class RemoteResolver:
    """Resolve :class:`RemoteDescriptor` objects, one git lookup per root."""

    def __init__(self, remote: str = UPSTREAM_REMOTE, settings: Settings | None = None) -> None:
        self.remote = remote
        self._timeout = (settings or Settings.from_env()).git_timeout
        self._cache: dict[Path, RemoteDescriptor | RemoteResolutionError] = {}

    def resolve(self, root: Path) -> RemoteDescriptor:
        """Return the remote URL and current ref of the repository at *root*.

        Raises RemoteNotConfiguredError when the remote is missing and
        UnresolvableRefError when HEAD names neither a branch nor a commit.
        A detached HEAD falls back to the commit hash as a ``rev``.
        """
        cached = self._cache.get(root)
        if isinstance(cached, RemoteResolutionError):
            raise cached
        if cached is not None:
            return cached
        try:
            descriptor = self._resolve(root)
        except RemoteResolutionError as e:
            self._cache[root] = e
            raise
        self._cache[root] = descriptor
        return descriptor

    def _resolve(self, root: Path) -> RemoteDescriptor:
        url = _git(root, "config", "--get", f"remote.{self.remote}.url", timeout=self._timeout)
        if not url:
            raise RemoteNotConfiguredError(root, self.remote)

        branch = _git(root, "symbolic-ref", "--quiet", "--short", "HEAD", timeout=self._timeout)
        if branch:
            log.debug("remote.resolved", root=str(root), url=url, branch=branch)
            return RemoteDescriptor(url=url, ref=branch, ref_kind="branch")

        commit = _git(root, "rev-parse", "--verify", "--quiet", "HEAD", timeout=self._timeout)
        if not commit:
            raise UnresolvableRefError(f"Cannot determine a branch or commit for {root}")
        log.warning(
            "remote.detached_head",
            root=str(root),
            url=url,
            rev=commit,
        )
        return RemoteDescriptor(url=url, ref=commit, ref_kind="rev")
