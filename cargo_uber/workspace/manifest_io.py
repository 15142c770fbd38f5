"""Read and write Cargo.toml files.

Read-only classification uses ``tomllib``; anything that is written back goes
through ``tomlkit`` so comments, key order and formatting survive.
"""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.toml_document import TOMLDocument

from cargo_uber.exceptions import ManifestParseError, WorkspaceError


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise WorkspaceError(f"Cannot read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ManifestParseError(path, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e


def read_manifest(path: Path) -> dict[str, Any]:
    """Parse *path* into plain Python data."""
    content = _read(path)
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(path, str(e)) from e


def load_document(path: Path) -> TOMLDocument:
    """Parse *path* into an editable document. A missing file gives an empty one."""
    if not path.exists():
        return tomlkit.document()
    content = _read(path)
    try:
        return tomlkit.parse(content)
    except TOMLKitError as e:
        raise ManifestParseError(path, str(e)) from e


def render_document(doc: TOMLDocument) -> str:
    return tomlkit.dumps(doc)


def write_atomic(path: Path, content: str) -> bool:
    """Write *content* to *path* via a sibling temp file and rename.

    Returns False without touching the file when it already holds *content*.
    """
    try:
        if path.exists() and path.read_bytes() == content.encode("utf-8"):
            return False
    except OSError as e:
        raise WorkspaceError(f"Cannot read {path}: {e}") from e

    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
        )
    except OSError as e:
        raise WorkspaceError(f"Cannot write {path}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        if path.exists():
            os.chmod(tmp_path, path.stat().st_mode & 0o7777)
        else:
            os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise WorkspaceError(f"Cannot write {path}: {e}") from e
    return True


def save_document(path: Path, doc: TOMLDocument) -> bool:
    return write_atomic(path, render_document(doc))
