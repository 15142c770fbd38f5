"""Workspace manifest writer — merge members/exclude into the parent Cargo.toml."""

from __future__ import annotations

from pathlib import Path

import structlog
import tomlkit
from tomlkit.items import Array
from tomlkit.toml_document import TOMLDocument

from cargo_uber.core.config import MANIFEST_NAME
from cargo_uber.exceptions import ManifestParseError
from cargo_uber.workspace.manifest_io import load_document, render_document, write_atomic
from cargo_uber.workspace.models import ScanResult

log = structlog.get_logger("cargo_uber.writer")


def _string_array(values: list[str]) -> Array:
    arr = tomlkit.array()
    arr.extend(values)
    if values:
        arr.multiline(True)
    return arr


def merge_workspace(doc: TOMLDocument, members: list[str], exclude: list[str]) -> TOMLDocument:
    """Set ``workspace.members`` and ``workspace.exclude`` on *doc*.

    Every other key of the document, including the rest of ``[workspace]``,
    is left as it was.
    """
    overlap = set(members) & set(exclude)
    if overlap:
        raise ValueError(f"paths listed as both member and excluded: {sorted(overlap)}")

    workspace = doc.get("workspace")
    if workspace is None:
        workspace = tomlkit.table()
        doc["workspace"] = workspace
        workspace = doc["workspace"]

    workspace["members"] = _string_array(members)
    workspace["exclude"] = _string_array(exclude)
    return doc


class WorkspaceManifestWriter:
    """Regenerate the parent manifest of a workspace from a scan."""

    def __init__(self, workspace: Path) -> None:
        self.workspace = workspace
        self.manifest_path = workspace / MANIFEST_NAME

    def render(self, scan_result: ScanResult) -> str:
        """Return the manifest text for *scan_result* without writing it."""
        doc = load_document(self.manifest_path)
        if "workspace" in doc and not isinstance(doc["workspace"], dict):
            raise ManifestParseError(self.manifest_path, "'workspace' is not a table")
        merge_workspace(doc, scan_result.members, scan_result.exclude)
        return render_document(doc)

    def write(self, scan_result: ScanResult) -> bool:
        """Write the regenerated manifest. Returns False when nothing changed."""
        content = self.render(scan_result)
        written = write_atomic(self.manifest_path, content)
        if written:
            log.info(
                "writer.manifest_written",
                path=str(self.manifest_path),
                members=len(scan_result.members),
                exclude=len(scan_result.exclude),
            )
        else:
            log.info("writer.manifest_unchanged", path=str(self.manifest_path))
        return written


def write_workspace(scan_result: ScanResult) -> bool:
    """Regenerate ``Cargo.toml`` at the root of *scan_result*'s workspace."""
    return WorkspaceManifestWriter(scan_result.workspace).write(scan_result)
