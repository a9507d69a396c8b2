from __future__ import annotations

from pathlib import Path

from relflow.cli.commands._helpers import (
    DRY_RUN_OPTION,
    VERSION_OPTION,
    exit_release,
    require_version,
)
from relflow.cli.context import ROOT_OPTION, build_context
from relflow.core.result import Err
from relflow.output.console import Style
from relflow.release.bump import bump as bump_version
from relflow.release.changelog import merge_changelog
from relflow.release.version_source import current_version


def current(root: Path | None = ROOT_OPTION) -> None:
    """Print the version currently declared by the repository."""
    ctx = build_context(root=root)
    found = current_version(config=ctx.config)
    if isinstance(found, Err):
        exit_release(found.error, console=ctx.console)
    ctx.console.print(str(found.value))


def bump(
    version: str | None = VERSION_OPTION,
    root: Path | None = ROOT_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Rewrite the version in every configured file."""
    target = require_version(version, command="bump")
    ctx = build_context(root=root)

    result = bump_version(
        config=ctx.config, new_version=target, console=ctx.console, dry_run=dry_run
    )
    if isinstance(result, Err):
        exit_release(result.error, console=ctx.console)

    bumped = result.value
    for path in bumped.changed:
        ctx.console.print(str(path.relative_to(ctx.config.root)), Style.DIM)
    ctx.console.success(f"bumped {bumped.previous} -> {bumped.new}")


def changelog(
    version: str | None = VERSION_OPTION,
    root: Path | None = ROOT_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Prepend the pending notes to the cumulative changelog."""
    target = require_version(version, command="changelog")
    ctx = build_context(root=root)

    merged = merge_changelog(
        version=target,
        pending_path=ctx.config.pending_changelog_path,
        cumulative_path=ctx.config.cumulative_changelog_path,
        console=ctx.console,
        dry_run=dry_run,
    )
    if isinstance(merged, Err):
        exit_release(merged.error, console=ctx.console)
    ctx.console.success(f"{merged.value.name} updated for {target}")
