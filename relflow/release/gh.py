from __future__ import annotations

import json
from pathlib import Path

from relflow.core.result import Err, Ok, Result
from relflow.core.structured import as_str_dict, get_str
from relflow.platform.process import ProcessError
from relflow.platform.process import run as run_process
from relflow.release.context import ReleaseContext
from relflow.release.errors import ReleaseError


def _is_not_found(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}"
    return "HTTP 404" in text or "Not Found" in text


def _tool_failed(message: str, error: ProcessError) -> ReleaseError:
    return ReleaseError(kind="tool_failed", message=message, hint=error.detail)


def _resource_exists(
    ctx: ReleaseContext, *, endpoint: str, what: str
) -> Result[dict[str, object] | None, ReleaseError]:
    cmd = ["gh", "api", endpoint]
    ctx.console.command(cmd)
    result = run_process(cmd, cwd=ctx.root, env=ctx.credentials.gh_env())
    if isinstance(result, Err):
        if _is_not_found(result.error):
            return Ok(None)
        return Err(_tool_failed(f"failed to look up {what}", result.error))

    try:
        obj: object = json.loads(result.value)
    except json.JSONDecodeError as e:
        return Err(
            ReleaseError(
                kind="tool_failed",
                message=f"gh api returned invalid JSON: {e}",
                hint=endpoint,
            )
        )

    data = as_str_dict(obj)
    if data is None:
        return Err(
            ReleaseError(kind="tool_failed", message=f"unexpected {what} payload", hint=endpoint)
        )
    return Ok(data)


def ensure_repo_visible(ctx: ReleaseContext) -> Result[None, ReleaseError]:
    """Fail unless `ctx.repo` resolves for the current token.

    GitHub answers 404 both for a missing repository and for one the token
    cannot see, so the tag and release lookups are only meaningful after this.
    """
    cmd = ["gh", "api", f"repos/{ctx.repo}"]
    ctx.console.command(cmd)
    result = run_process(cmd, cwd=ctx.root, env=ctx.credentials.gh_env())
    if isinstance(result, Err):
        if _is_not_found(result.error):
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message=f"repository {ctx.repo} not found or not visible to the token",
                    hint="Check [github] repo in relflow.toml and the token's access.",
                )
            )
        return Err(_tool_failed(f"failed to look up repository {ctx.repo}", result.error))
    return Ok(None)


def tag_exists(ctx: ReleaseContext, *, tag: str) -> Result[bool, ReleaseError]:
    # git/ref (singular) matches the exact ref; git/refs would prefix-match 5.0.0 -> 5.0.0-rc
    found = _resource_exists(
        ctx, endpoint=f"repos/{ctx.repo}/git/ref/tags/{tag}", what=f"tag {tag}"
    )
    if isinstance(found, Err):
        return found
    return Ok(found.value is not None)


def release_exists(ctx: ReleaseContext, *, tag: str) -> Result[bool, ReleaseError]:
    found = _resource_exists(
        ctx, endpoint=f"repos/{ctx.repo}/releases/tags/{tag}", what=f"release {tag}"
    )
    if isinstance(found, Err):
        return found
    if found.value is None:
        return Ok(False)
    return Ok(get_str(found.value, "tag_name") == tag)


def create_release(
    ctx: ReleaseContext,
    *,
    tag: str,
    title: str,
    notes_file: Path,
    target: str,
    assets: tuple[Path, ...],
) -> Result[str, ReleaseError]:
    """Create the hosted release (and its tag) and upload `assets`.

    Returns the release URL printed by gh.
    """
    cmd = [
        "gh",
        "release",
        "create",
        tag,
        *(str(a) for a in assets),
        "--repo",
        ctx.repo,
        "--title",
        title,
        "--notes-file",
        str(notes_file),
        "--target",
        target,
    ]
    ctx.console.command(cmd)
    if ctx.dry_run:
        return Ok("(dry-run)")

    result = run_process(cmd, cwd=ctx.root, env=ctx.credentials.gh_env())
    if isinstance(result, Err):
        return Err(_tool_failed(f"failed to create GitHub release {tag}", result.error))

    return Ok(result.value.strip().splitlines()[-1] if result.value.strip() else "")


def create_pull_request(
    ctx: ReleaseContext,
    *,
    base: str,
    head: str,
    title: str,
    body: str,
) -> Result[str, ReleaseError]:
    cmd = [
        "gh",
        "pr",
        "create",
        "--repo",
        ctx.repo,
        "--base",
        base,
        "--head",
        head,
        "--title",
        title,
        "--body",
        body,
    ]
    ctx.console.command(cmd)
    if ctx.dry_run:
        return Ok("(dry-run)")

    result = run_process(cmd, cwd=ctx.root, env=ctx.credentials.gh_env())
    if isinstance(result, Err):
        return Err(_tool_failed(f"failed to open pull request {head} -> {base}", result.error))

    url = result.value.strip()
    if not url.startswith("https://"):
        return Err(
            ReleaseError(kind="tool_failed", message="unexpected gh pr create output", hint=url)
        )
    return Ok(url)
