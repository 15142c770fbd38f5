"""Tests for dependency source parsing and conversion."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit

from cargo_uber.workspace.dependencies import (
    PathReference,
    RemoteReference,
    apply_source,
    iter_references,
    normalize_path,
    parse_source,
    resolve_path,
    to_path_reference,
    to_remote_reference,
)
from cargo_uber.workspace.models import RemoteDescriptor


# ── parse_source ─────────────────────────────────────────────────────────


class TestParseSource:
    def test_path(self):
        assert parse_source({"path": "../core"}) == PathReference(path="../core")

    def test_git_with_branch(self):
        src = parse_source({"git": "https://example.com/x.git", "branch": "dev"})
        assert src == RemoteReference(git="https://example.com/x.git", ref_kind="branch", ref="dev")

    def test_git_with_rev(self):
        src = parse_source({"git": "u", "rev": "abc123"})
        assert src == RemoteReference(git="u", ref_kind="rev", ref="abc123")

    def test_git_with_tag(self):
        src = parse_source({"git": "u", "tag": "v1.0"})
        assert src == RemoteReference(git="u", ref_kind="tag", ref="v1.0")

    def test_git_without_ref(self):
        assert parse_source({"git": "u"}) == RemoteReference(git="u")

    def test_version_string_is_not_a_reference(self):
        assert parse_source("1.0") is None

    def test_registry_table_is_not_a_reference(self):
        assert parse_source({"version": "1.0", "features": ["x"]}) is None

    def test_path_and_git_together_is_not_a_reference(self):
        assert parse_source({"path": "../x", "git": "u"}) is None

    def test_two_refs_is_not_a_reference(self):
        assert parse_source({"git": "u", "branch": "a", "rev": "b"}) is None

    def test_tomlkit_inline_table(self):
        doc = tomlkit.parse('[dependencies]\nx = { path = "../x", version = "0.2" }\n')
        assert parse_source(doc["dependencies"]["x"]) == PathReference(path="../x")


# ── conversions ──────────────────────────────────────────────────────────


class TestConversions:
    def test_to_path_reference_sibling_root(self, tmp_path: Path):
        ref = to_path_reference(tmp_path / "alpha" / "cli", tmp_path / "beta" / "lib")
        assert ref == PathReference(path="../../beta/lib")

    def test_to_path_reference_same_root(self, tmp_path: Path):
        ref = to_path_reference(tmp_path / "alpha" / "cli", tmp_path / "alpha" / "core")
        assert ref == PathReference(path="../core")

    def test_to_remote_reference_branch(self):
        desc = RemoteDescriptor(url="git@host:org/beta.git", ref="main", ref_kind="branch")
        assert to_remote_reference(desc) == RemoteReference(
            git="git@host:org/beta.git", ref_kind="branch", ref="main"
        )

    def test_to_remote_reference_rev(self):
        desc = RemoteDescriptor(url="u", ref="deadbeef", ref_kind="rev")
        assert to_remote_reference(desc).fields() == [("git", "u"), ("rev", "deadbeef")]

    def test_resolve_path_normalizes(self, tmp_path: Path):
        got = resolve_path(tmp_path / "alpha" / "cli", PathReference(path="../core/../../beta/lib/"))
        assert got == tmp_path / "beta" / "lib"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("../core/", "../core"),
            ("./../core", "../core"),
            ("..\\core", "../core"),
            ("../x/../core", "../core"),
        ],
    )
    def test_normalize_path(self, raw, expected):
        assert normalize_path(raw) == expected


# ── apply_source ─────────────────────────────────────────────────────────


class TestApplySource:
    def test_inline_table_path_to_git_keeps_other_keys(self):
        doc = tomlkit.parse(
            '[dependencies]\n'
            'beta-lib = { path = "../../beta/lib", features = ["fast"], optional = true }\n'
            'serde = "1.0"\n'
        )
        deps = doc["dependencies"]
        apply_source(deps, "beta-lib", RemoteReference(git="u", ref_kind="branch", ref="main"))

        entry = deps["beta-lib"]
        assert list(entry.keys()) == ["git", "branch", "features", "optional"]
        assert entry.unwrap() == {
            "git": "u",
            "branch": "main",
            "features": ["fast"],
            "optional": True,
        }
        assert list(deps.keys()) == ["beta-lib", "serde"]
        assert deps["serde"] == "1.0"

    def test_inline_table_git_to_path_drops_all_ref_keys(self):
        doc = tomlkit.parse('[dependencies]\nx = { git = "u", rev = "abc", version = "0.3" }\n')
        apply_source(doc["dependencies"], "x", PathReference(path="../x"))
        assert doc["dependencies"]["x"].unwrap() == {"path": "../x", "version": "0.3"}

    def test_full_table_entry(self):
        doc = tomlkit.parse(
            '[package]\nname = "a"\n\n'
            '[dependencies.beta-lib]\npath = "../beta"\nversion = "0.1"\n'
        )
        apply_source(
            doc["dependencies"], "beta-lib", RemoteReference(git="u", ref_kind="rev", ref="abc")
        )
        reparsed = tomlkit.parse(tomlkit.dumps(doc))
        assert reparsed["dependencies"]["beta-lib"].unwrap() == {
            "git": "u",
            "rev": "abc",
            "version": "0.1",
        }
        assert reparsed["package"]["name"] == "a"

    def test_output_reparses(self):
        doc = tomlkit.parse('# top\n[dependencies]\nx = { path = "../x" } # keep\n')
        apply_source(doc["dependencies"], "x", RemoteReference(git="u", ref_kind="branch", ref="b"))
        text = tomlkit.dumps(doc)
        assert text.startswith("# top\n")
        assert tomlkit.parse(text)["dependencies"]["x"].unwrap() == {"git": "u", "branch": "b"}


# ── iter_references ──────────────────────────────────────────────────────


class TestIterReferences:
    def test_all_dependency_tables(self):
        doc = tomlkit.parse(
            '[dependencies]\n'
            'a = { path = "../a" }\n'
            'plain = "1"\n'
            '[dev-dependencies]\n'
            'b = { git = "u", branch = "main" }\n'
            '[build-dependencies]\n'
            'c = { path = "../c" }\n'
            "[target.'cfg(unix)'.dependencies]\n"
            'd = { path = "../d" }\n'
        )
        refs = list(iter_references(doc))
        assert [(r.table, r.key) for r in refs] == [
            ("dependencies", "a"),
            ("dev-dependencies", "b"),
            ("build-dependencies", "c"),
            ("target.cfg(unix).dependencies", "d"),
        ]
        assert isinstance(refs[1].source, RemoteReference)

    def test_renamed_package(self):
        doc = tomlkit.parse('[dependencies]\nlib = { package = "beta-lib", path = "../b" }\n')
        (ref,) = iter_references(doc)
        assert ref.key == "lib"
        assert ref.package == "beta-lib"

    def test_no_dependencies(self):
        doc = tomlkit.parse('[package]\nname = "x"\n')
        assert list(iter_references(doc)) == []
