from __future__ import annotations

from dataclasses import dataclass

from relflow.core.config import ReleaseConfig
from relflow.core.result import Err, Ok, Result
from relflow.git.repository import GitError, Repository
from relflow.release import gh
from relflow.release.bump import bump
from relflow.release.changelog import (
    has_entry,
    read_cumulative_changelog,
    retire_pending_changelog,
)
from relflow.release.context import ReleaseContext
from relflow.release.errors import ReleaseError
from relflow.release.semver import Version, next_development_version


@dataclass(frozen=True, slots=True)
class NextVersion:
    version: Version
    branch: str
    commit_sha: str
    pr_url: str


def next_branch_name(config: ReleaseConfig, version: Version) -> str:
    return f"{config.next_version.branch_prefix}{version}"


def _git_failed(error: GitError, *, branch: str) -> ReleaseError:
    return ReleaseError(
        kind="tool_failed",
        message=f"git {error.command} failed on {branch}",
        hint=error.message,
    )


def _require_changelog_entry(
    ctx: ReleaseContext, released: Version
) -> Result[None, ReleaseError]:
    # The pending notes are truncated below; they must already be in the history.
    path = ctx.config.cumulative_changelog_path
    cumulative = read_cumulative_changelog(path=path)
    if isinstance(cumulative, Err):
        return cumulative
    if has_entry(cumulative.value, released):
        return Ok(None)

    message = f"{path.name} has no entry for {released}"
    if ctx.dry_run:
        ctx.console.warning(message)
        return Ok(None)
    return Err(
        ReleaseError(
            kind="missing_changelog",
            message=message,
            hint=f"Run: relflow changelog --version {released}",
        )
    )


def check_clean_tree(ctx: ReleaseContext) -> Result[None, ReleaseError]:
    """Only changelog edits may ride along in the next-version commit."""
    modified = Repository(ctx.root).modified_files()
    if isinstance(modified, Err):
        error = modified.error
        return Err(
            ReleaseError(
                kind="tool_failed", message=f"git {error.command} failed", hint=error.message
            )
        )

    config = ctx.config
    allowed = {config.changelog.pending, config.changelog.cumulative}
    stray = [p for p in modified.value if p not in allowed]
    if stray:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="uncommitted changes would land in the next-version commit: "
                + ", ".join(stray),
                hint="Commit or stash them, then rerun.",
            )
        )
    return Ok(None)


def prepare_next_version(
    ctx: ReleaseContext, released: Version
) -> Result[NextVersion, ReleaseError]:
    """Open the bump PR for the development version after `released`.

    Refuses to start unless the cumulative changelog already holds
    `released` and the only uncommitted tracked changes are the changelogs.
    Not idempotent: a rerun fails on `git checkout -b` if the branch was
    already created, and a failed push or PR leaves the local branch behind.
    """
    config = ctx.config
    upcoming = next_development_version(released)
    branch = next_branch_name(config, upcoming)
    repo = Repository(ctx.root)

    recorded = _require_changelog_entry(ctx, released)
    if isinstance(recorded, Err):
        return recorded

    clean = check_clean_tree(ctx)
    if isinstance(clean, Err):
        return clean

    ctx.console.command(["git", "checkout", "-b", branch])
    if not ctx.dry_run:
        created = repo.create_branch(branch)
        if isinstance(created, Err):
            return Err(_git_failed(created.error, branch=branch))

    bumped = bump(config=config, new_version=upcoming, console=ctx.console, dry_run=ctx.dry_run)
    if isinstance(bumped, Err):
        return bumped

    retired = retire_pending_changelog(
        path=config.pending_changelog_path, console=ctx.console, dry_run=ctx.dry_run
    )
    if isinstance(retired, Err):
        return retired

    message = config.next_version.commit_message
    ctx.console.command(["git", "commit", "-am", message])
    ctx.console.command(["git", "push", "-u", "origin", branch])
    sha = "0" * 40
    if not ctx.dry_run:
        committed = repo.commit_all(message)
        if isinstance(committed, Err):
            return Err(_git_failed(committed.error, branch=branch))
        sha = committed.value

        pushed = repo.push(branch)
        if isinstance(pushed, Err):
            return Err(_git_failed(pushed.error, branch=branch))

    pr = gh.create_pull_request(
        ctx,
        base=config.github.integration_branch,
        head=branch,
        title=f"Prepare next version: {upcoming}",
        body=f"Bumps version files from {released} to {upcoming} after releasing {released}.",
    )
    if isinstance(pr, Err):
        return pr

    return Ok(NextVersion(version=upcoming, branch=branch, commit_sha=sha, pr_url=pr.value))
