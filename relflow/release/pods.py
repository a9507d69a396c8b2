"""CocoaPods collaborator: manifest lint and trunk publication."""

from __future__ import annotations

from relflow.core.config import ManifestConfig
from relflow.core.result import Err, Ok, Result
from relflow.platform.process import run_streaming
from relflow.release.context import ReleaseContext
from relflow.release.errors import ReleaseError


def _include_flag(include: tuple[str, ...]) -> list[str]:
    if not include:
        return []
    if len(include) == 1:
        return [f"--include-podspecs={include[0]}"]
    # pod accepts a glob; brace form selects several local podspecs
    return [f"--include-podspecs={{{','.join(include)}}}"]


def lint_command(manifest: ManifestConfig) -> list[str]:
    return ["pod", "lib", "lint", "--verbose", manifest.path, *_include_flag(manifest.include)]


def push_command(manifest: ManifestConfig) -> list[str]:
    cmd = ["pod", "trunk", "push", manifest.path]
    if manifest.synchronous:
        cmd.append("--synchronous")
    return cmd


def lint_manifest(ctx: ReleaseContext, manifest: ManifestConfig) -> Result[None, ReleaseError]:
    cmd = lint_command(manifest)
    ctx.console.command(cmd)
    if ctx.dry_run:
        return Ok(None)

    result = run_streaming(cmd, cwd=ctx.root)
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="lint_failed",
                message=f"pod lib lint failed for {manifest.path}",
                hint=str(result.error),
            )
        )
    return Ok(None)


def push_manifest(ctx: ReleaseContext, manifest: ManifestConfig) -> Result[None, ReleaseError]:
    cmd = push_command(manifest)
    ctx.console.command(cmd)
    if ctx.dry_run:
        return Ok(None)

    result = run_streaming(cmd, cwd=ctx.root)
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="tool_failed",
                message=f"pod trunk push failed for {manifest.path}",
                hint=str(result.error),
            )
        )
    return Ok(None)
