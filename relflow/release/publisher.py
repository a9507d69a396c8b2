from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relflow.core.result import Err, Ok, Result
from relflow.output.console import Style
from relflow.release import carthage, gh, pods
from relflow.release.changelog import read_pending_changelog
from relflow.release.context import ReleaseContext
from relflow.release.errors import ReleaseError
from relflow.release.semver import Version


@dataclass(frozen=True, slots=True)
class ReleaseRecord:
    """The externally visible result of a release."""

    tag: str
    name: str
    asset: Path
    url: str


def publish_packages(ctx: ReleaseContext) -> Result[None, ReleaseError]:
    """Push every manifest to the registry in declaration order.

    Manifests flagged `synchronous` wait for registry propagation, so the
    ones after them can depend on the version just pushed.
    """
    for manifest in ctx.config.manifests:
        pushed = pods.push_manifest(ctx, manifest)
        if isinstance(pushed, Err):
            return pushed
    return Ok(None)


def rebuild_archive(ctx: ReleaseContext) -> Result[None, ReleaseError]:
    return carthage.build_and_archive(ctx)


def github_release(ctx: ReleaseContext, version: Version) -> Result[ReleaseRecord, ReleaseError]:
    # Notes first: a release without notes must fail before touching the network.
    notes = read_pending_changelog(path=ctx.config.pending_changelog_path)
    if isinstance(notes, Err):
        return notes

    asset = ctx.config.asset_path
    if not asset.is_file():
        if not ctx.dry_run:
            return Err(
                ReleaseError(
                    kind="archive_build_failed",
                    message=f"release asset not found: {asset.name}",
                    hint=f"Expected carthage archive output at {asset}",
                )
            )
        ctx.console.print(f"asset {asset.name} not built yet (dry-run)", Style.DIM)

    tag = str(version)
    url = gh.create_release(
        ctx,
        tag=tag,
        title=tag,
        notes_file=notes.value.path,
        target=ctx.config.github.release_branch,
        assets=(asset,),
    )
    if isinstance(url, Err):
        return url

    return Ok(ReleaseRecord(tag=tag, name=tag, asset=asset, url=url.value))
