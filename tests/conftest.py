"""Shared pytest fixtures for cargo-uber tests."""

from __future__ import annotations

from pathlib import Path

import pytest


def _write_crate(path: Path, name: str, deps: str = "", extra: str = "") -> Path:
    path.mkdir(parents=True, exist_ok=True)
    body = f'[package]\nname = "{name}"\nversion = "0.1.0"\nedition = "2021"\n'
    if extra:
        body += f"\n{extra.strip()}\n"
    if deps:
        body += f"\n[dependencies]\n{deps.strip()}\n"
    (path / "Cargo.toml").write_text(body)
    return path


def _make_root(path: Path, manifest: str | None = None) -> Path:
    (path / ".git").mkdir(parents=True, exist_ok=True)
    if manifest is not None:
        (path / "Cargo.toml").write_text(manifest)
    return path


@pytest.fixture
def make_crate():
    """Factory: create ``path/Cargo.toml`` for a package."""
    return _write_crate


@pytest.fixture
def make_root():
    """Factory: create a cloned project root (a directory holding ``.git``)."""
    return _make_root


@pytest.fixture
def alpha_beta(tmp_path: Path) -> Path:
    """Two cloned roots: alpha (core, cli) and beta (lib).

    alpha/cli depends on alpha/core and beta/lib by path.
    """
    _make_root(tmp_path / "alpha", '[workspace]\nmembers = ["core", "cli"]\n')
    _make_root(tmp_path / "beta", '[workspace]\nmembers = ["lib"]\n')
    _write_crate(tmp_path / "alpha" / "core", "alpha-core")
    _write_crate(
        tmp_path / "alpha" / "cli",
        "alpha-cli",
        deps=(
            'alpha-core = { path = "../core" }\n'
            'beta-lib = { path = "../../beta/lib", features = ["fast"] }\n'
            'serde = "1.0"\n'
        ),
    )
    _write_crate(tmp_path / "beta" / "lib", "beta-lib")
    return tmp_path
