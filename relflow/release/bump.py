from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relflow.core.config import ReleaseConfig
from relflow.core.result import Err, Ok, Result
from relflow.output.console import ConsoleProtocol
from relflow.release.errors import ReleaseError
from relflow.release.patch import apply_patch_set, patch_targets
from relflow.release.semver import Version
from relflow.release.version_source import current_version


@dataclass(frozen=True, slots=True)
class BumpResult:
    previous: Version
    new: Version
    changed: tuple[Path, ...]


def bump(
    *,
    config: ReleaseConfig,
    new_version: Version,
    console: ConsoleProtocol,
    dry_run: bool,
) -> Result[BumpResult, ReleaseError]:
    """Move every version-bearing file from the current version to `new_version`."""
    previous = current_version(config=config)
    if isinstance(previous, Err):
        return previous

    if new_version <= previous.value:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"version must increase: {previous.value} -> {new_version}",
                hint=f"current version is {previous.value}",
            )
        )

    targets = patch_targets(
        root=config.root,
        files=config.version.files,
        previous=str(previous.value),
        new=str(new_version),
    )
    report = apply_patch_set(
        targets=targets,
        backup_suffix=config.version.backup_suffix,
        validate_first=config.version.validate_first,
        console=console,
        dry_run=dry_run,
    )
    if isinstance(report, Err):
        return report

    return Ok(BumpResult(previous=previous.value, new=new_version, changed=report.value.patched))
