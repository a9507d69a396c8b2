"""Local git operations used while preparing the next version.

Usage:
    repo = Repository(Path("/path/to/library"))
    created = repo.create_branch("bump/5.1.0")
    if isinstance(created, Err):
        print(created.error.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relflow.core.result import Err, Ok, Result
from relflow.platform.process import ProcessError
from relflow.platform.process import run as run_process

# Local queries only; network operations (push) are not time-limited.
_GIT_LOCAL_TIMEOUT_SECONDS = 30.0

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "checkout -b")
        message: Git's own error output
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """A git working tree rooted at `path`."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def modified_files(self) -> Result[list[str], GitError]:
        """Tracked paths with uncommitted changes, relative to the root."""
        result = self._checked(
            ["status", "--porcelain", "--untracked-files=no"], command="status --porcelain"
        )
        if isinstance(result, Err):
            return result
        # "XY path", or "XY old -> new" for renames
        return Ok([line[3:].split(" -> ")[-1] for line in result.value.splitlines() if line])

    def create_branch(self, name: str) -> Result[None, GitError]:
        """Create `name` from HEAD and check it out.

        Fails if the branch already exists.
        """
        return self._checked(["checkout", "-b", name], command="checkout -b").map(lambda _: None)

    def commit_all(self, message: str) -> Result[str, GitError]:
        """Commit every tracked modification and return the new HEAD sha."""
        committed = self._checked(["commit", "-am", message], command="commit -am")
        if isinstance(committed, Err):
            return committed
        return self.head_sha()

    def push(self, branch: str, *, remote: str = "origin") -> Result[None, GitError]:
        """Push `branch` and set its upstream."""
        return self._checked(["push", "-u", remote, branch], command="push -u").map(lambda _: None)

    def head_sha(self) -> Result[str, GitError]:
        result = self._checked(["rev-parse", "HEAD"], command="rev-parse HEAD")
        if isinstance(result, Err):
            return result
        sha = result.value.strip()
        if len(sha) != 40:
            return Err(GitError(command="rev-parse HEAD", message=f"unexpected sha: {sha!r}"))
        return Ok(sha)

    def _checked(self, args: list[str], *, command: str) -> Result[str, GitError]:
        result = self._run(args, local=command != "push -u")
        if isinstance(result, Err):
            e = result.error
            return Err(
                GitError(
                    command=command,
                    message=e.stderr.strip() or e.stdout.strip() or f"git {command} failed",
                    returncode=e.returncode,
                )
            )
        return Ok(result.value)

    def _run(self, args: list[str], *, local: bool) -> Result[str, ProcessError]:
        timeout = _GIT_LOCAL_TIMEOUT_SECONDS if local else None
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
