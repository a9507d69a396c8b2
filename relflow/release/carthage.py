"""Carthage collaborator: framework build and archive."""

from __future__ import annotations

from relflow.core.result import Err, Ok, Result
from relflow.platform.process import run_streaming
from relflow.release.context import ReleaseContext
from relflow.release.errors import ReleaseError


def archive_commands(product: str) -> tuple[list[str], list[str]]:
    return (
        ["carthage", "build", "--no-skip-current"],
        ["carthage", "archive", product],
    )


def build_and_archive(ctx: ReleaseContext) -> Result[None, ReleaseError]:
    """Build the framework from the working tree and zip it for upload."""
    product = ctx.config.archive.product
    for cmd in archive_commands(product):
        ctx.console.command(cmd)
        if ctx.dry_run:
            continue

        result = run_streaming(cmd, cwd=ctx.root)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="archive_build_failed",
                    message=f"carthage {cmd[1]} failed for {product}",
                    hint=str(result.error),
                )
            )
    return Ok(None)
