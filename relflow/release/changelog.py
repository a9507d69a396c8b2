from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relflow.core.result import Err, Ok, Result
from relflow.output.console import ConsoleProtocol, Style
from relflow.platform.files import atomic_write_text
from relflow.release.errors import ReleaseError
from relflow.release.semver import Version


@dataclass(frozen=True, slots=True)
class PendingNotes:
    path: Path
    markdown: str


def version_header(version: Version) -> str:
    return f"## {version}"


def read_pending_changelog(*, path: Path) -> Result[PendingNotes, ReleaseError]:
    """Load the notes authored since the last release.

    A release cannot go out without them: a missing, unreadable or blank
    document is a missing_changelog error.
    """
    hint = f"Write the release notes to {path.name} before releasing."
    if not path.is_file():
        return Err(
            ReleaseError(
                kind="missing_changelog",
                message=f"pending changelog not found: {path}",
                hint=hint,
            )
        )

    try:
        markdown = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(
                kind="missing_changelog",
                message=f"failed to read pending changelog: {e}",
                hint=hint,
            )
        )

    if not markdown.strip():
        return Err(
            ReleaseError(
                kind="missing_changelog",
                message=f"pending changelog is empty: {path}",
                hint=hint,
            )
        )

    return Ok(PendingNotes(path=path, markdown=markdown))


def render_changelog(*, version: Version, pending: str, cumulative: str) -> str:
    """Newest release first: header, pending notes, blank separator, history."""
    body = pending if pending.endswith("\n") else pending + "\n"
    return f"{version_header(version)}\n{body}\n{cumulative}"


def has_entry(cumulative: str, version: Version) -> bool:
    header = version_header(version)
    return any(line.rstrip() == header for line in cumulative.splitlines())


def read_cumulative_changelog(*, path: Path) -> Result[str, ReleaseError]:
    """A missing cumulative changelog reads as empty."""
    try:
        return Ok(path.read_text(encoding="utf-8") if path.exists() else "")
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"failed to read changelog: {e}",
                hint=str(path),
            )
        )


def merge_changelog(
    *,
    version: Version,
    pending_path: Path,
    cumulative_path: Path,
    console: ConsoleProtocol,
    dry_run: bool,
) -> Result[Path, ReleaseError]:
    """Prepend the pending notes to the cumulative changelog under `## <version>`.

    The pending document is left in place: the GitHub release reads it as its
    description. It is emptied when the next version is prepared.
    """
    pending = read_pending_changelog(path=pending_path)
    if isinstance(pending, Err):
        return pending

    read = read_cumulative_changelog(path=cumulative_path)
    if isinstance(read, Err):
        return read
    cumulative = read.value

    if has_entry(cumulative, version):
        return Err(
            ReleaseError(
                kind="duplicate_changelog_entry",
                message=f"{cumulative_path.name} already has an entry for {version}",
                hint="Remove the existing section or release a new version.",
            )
        )

    console.print(
        f"prepend {pending_path.name} to {cumulative_path.name} as {version_header(version)}",
        Style.DIM,
    )
    if dry_run:
        return Ok(cumulative_path)

    merged = render_changelog(
        version=version, pending=pending.value.markdown, cumulative=cumulative
    )
    try:
        atomic_write_text(cumulative_path, merged, encoding="utf-8")
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"failed to write changelog: {e}",
                hint=str(cumulative_path),
            )
        )

    return Ok(cumulative_path)


def ensure_changelog_entry(
    *,
    version: Version,
    pending_path: Path,
    cumulative_path: Path,
    console: ConsoleProtocol,
    dry_run: bool,
) -> Result[Path, ReleaseError]:
    """Merge the pending notes unless `relflow changelog` already did."""
    read = read_cumulative_changelog(path=cumulative_path)
    if isinstance(read, Err):
        return read
    if has_entry(read.value, version):
        console.info(f"{cumulative_path.name} already has {version_header(version)}")
        return Ok(cumulative_path)

    return merge_changelog(
        version=version,
        pending_path=pending_path,
        cumulative_path=cumulative_path,
        console=console,
        dry_run=dry_run,
    )


def retire_pending_changelog(
    *, path: Path, console: ConsoleProtocol, dry_run: bool
) -> Result[None, ReleaseError]:
    """Empty the pending document so the next cycle starts without old notes."""
    console.print(f"truncate {path.name}", Style.DIM)
    if dry_run or not path.exists():
        return Ok(None)

    try:
        atomic_write_text(path, "", encoding="utf-8")
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"failed to truncate pending changelog: {e}",
                hint=str(path),
            )
        )
    return Ok(None)
