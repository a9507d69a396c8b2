"""Release gates that must all pass before anything is published.

Each gate is independent: it only reads the repository or the remote and
returns Ok(None) or the error that blocks the release. Gates run in the
order given and stop at the first failure.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Literal

from relflow.core.result import Err, Ok, Result
from relflow.release import carthage, gh, pods
from relflow.release.context import ReleaseContext
from relflow.release.errors import ReleaseError
from relflow.release.semver import Version

GateName = Literal["tag", "lint", "archive", "release"]
Gate = Callable[[ReleaseContext, Version], Result[None, ReleaseError]]

DEFAULT_GATES: tuple[GateName, ...] = ("tag", "lint", "archive", "release")

# A 404 from these lookups means "absent" only once the repository resolves.
_REMOTE_GATES: frozenset[GateName] = frozenset({"tag", "release"})


def check_tag_unique(ctx: ReleaseContext, version: Version) -> Result[None, ReleaseError]:
    exists = gh.tag_exists(ctx, tag=str(version))
    if isinstance(exists, Err):
        return exists
    if exists.value:
        return Err(
            ReleaseError(
                kind="duplicate_tag",
                message=f"tag {version} already exists on {ctx.repo}",
                hint="Pick a new version; published tags are never moved.",
            )
        )
    return Ok(None)


def check_packages_lint(ctx: ReleaseContext, version: Version) -> Result[None, ReleaseError]:
    del version
    for manifest in ctx.config.manifests:
        linted = pods.lint_manifest(ctx, manifest)
        if isinstance(linted, Err):
            return linted
    return Ok(None)


def check_archive_builds(ctx: ReleaseContext, version: Version) -> Result[None, ReleaseError]:
    del version
    return carthage.build_and_archive(ctx)


def check_release_unique(ctx: ReleaseContext, version: Version) -> Result[None, ReleaseError]:
    exists = gh.release_exists(ctx, tag=str(version))
    if isinstance(exists, Err):
        return exists
    if exists.value:
        return Err(
            ReleaseError(
                kind="duplicate_release",
                message=f"release {version} already exists on {ctx.repo}",
                hint=f"https://github.com/{ctx.repo}/releases/tag/{version}",
            )
        )
    return Ok(None)


GATES: Mapping[GateName, Gate] = {
    "tag": check_tag_unique,
    "lint": check_packages_lint,
    "archive": check_archive_builds,
    "release": check_release_unique,
}


def run_preflight(
    ctx: ReleaseContext,
    version: Version,
    *,
    gates: tuple[GateName, ...] = DEFAULT_GATES,
) -> Result[None, ReleaseError]:
    if any(name in _REMOTE_GATES for name in gates):
        visible = gh.ensure_repo_visible(ctx)
        if isinstance(visible, Err):
            return visible

    for name in gates:
        ctx.console.header(f"Gate: {name}")
        passed = GATES[name](ctx, version)
        if isinstance(passed, Err):
            return passed
        ctx.console.success(f"{name} gate passed")
    return Ok(None)
