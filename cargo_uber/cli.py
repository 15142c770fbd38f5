"""CLI entry point: cargo-uber.

Usage:
    cargo-uber                 # (re)generate ./Cargo.toml from the cloned roots below it
    cargo-uber git-ref         # point cross-root path dependencies at upstream git refs
    cargo-uber local-path      # point git dependencies back at the local checkouts
    cargo-uber -C ~/src/ws     # operate on another workspace directory
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from cargo_uber import __version__
from cargo_uber.core.config import MANIFEST_NAME, UPSTREAM_REMOTE, Settings
from cargo_uber.core.logging import setup_logging
from cargo_uber.exceptions import UberError
from cargo_uber.workspace.models import RewriteReport
from cargo_uber.workspace.remote import RemoteResolver
from cargo_uber.workspace.rewriter import GIT_REF, LOCAL_PATH, rewrite
from cargo_uber.workspace.scanner import scan
from cargo_uber.workspace.writer import WorkspaceManifestWriter

_VERSION_MODE = "version"


def _print_report(report: RewriteReport) -> None:
    click.echo(f"Mode: {report.mode}")
    click.echo(f"  Rewritten: {len(report.rewritten)}")
    for item in report.rewritten:
        click.echo(f"    [+] {item.package}: {item.dependency} -> {item.detail}")
    click.echo(f"  Skipped: {len(report.skipped)}")
    for item in report.skipped:
        click.echo(f"    [-] {item.package}: {item.dependency} ({item.detail})")
    click.echo(f"  Failed: {len(report.failed)}")
    for package, error in sorted(report.failed.items()):
        click.echo(f"    [!] {package}: {error}")


def _generate(workspace: Path) -> None:
    result = scan(workspace)
    writer = WorkspaceManifestWriter(result.workspace)
    written = writer.write(result)
    state = "written" if written else "unchanged"
    click.echo(f"{writer.manifest_path} {state}")
    click.echo(f"  Members: {len(result.members)}")
    click.echo(f"  Excluded: {len(result.exclude)}")


def _switch(workspace: Path, mode: str, settings: Settings) -> bool:
    result = scan(workspace)
    report = rewrite(result, mode, RemoteResolver(UPSTREAM_REMOTE, settings))
    _print_report(report)
    return report.ok


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=f"git-ref mode reads the '{UPSTREAM_REMOTE}' remote of each cloned root.",
)
@click.argument(
    "mode",
    required=False,
    type=click.Choice([LOCAL_PATH, GIT_REF, _VERSION_MODE]),
)
@click.option(
    "-C",
    "--directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Workspace directory holding the cloned roots",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.version_option(
    __version__, "-V", "--version", prog_name="cargo-uber", message="%(prog)s %(version)s"
)
def main(mode: str | None, directory: Path, verbose: bool) -> None:
    """Aggregate cloned Cargo trees into one workspace.

    Without MODE, regenerate the workspace members/exclude lists in
    ./Cargo.toml. With MODE, rewrite dependencies between sibling packages
    to local paths (local-path) or upstream git refs (git-ref).
    """
    if mode == _VERSION_MODE:
        click.echo(f"cargo-uber {__version__}")
        return

    settings = Settings.from_env()
    setup_logging(settings, verbose=verbose)

    try:
        if mode is None:
            _generate(directory)
            return
        ok = _switch(directory, mode, settings)
    except UberError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not ok:
        click.echo(f"Error: some {MANIFEST_NAME} files could not be rewritten.", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
