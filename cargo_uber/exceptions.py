"""Custom exceptions for cargo-uber."""

from __future__ import annotations

from pathlib import Path


class UberError(Exception):
    """Base exception for all cargo-uber errors."""


class WorkspaceError(UberError):
    """Raised when a workspace path cannot be read or written."""


class ManifestParseError(UberError):
    """Raised when a Cargo.toml cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot parse {path}: {reason}")


class RemoteResolutionError(UberError):
    """Raised when a project root's remote identity cannot be resolved."""


class RemoteNotConfiguredError(RemoteResolutionError):
    """Raised when the project root has no remote with the expected name."""

    def __init__(self, root: Path, remote: str):
        self.root = root
        self.remote = remote
        super().__init__(f"No '{remote}' remote configured in {root}")


class UnresolvableRefError(RemoteResolutionError):
    """Raised when neither a branch nor a commit can be read from HEAD."""


class AmbiguousDependencyError(UberError):
    """Raised when a dependency name matches more than one workspace package."""

    def __init__(self, name: str, candidates: list[str]):
        self.name = name
        self.candidates = candidates
        super().__init__(
            f"Ambiguous dependency '{name}' matches {len(candidates)} packages: "
            f"{candidates}"
        )
