from __future__ import annotations

import re

from relflow.core.config import ReleaseConfig
from relflow.core.result import Err, Ok, Result
from relflow.release.errors import ReleaseError
from relflow.release.semver import Version, parse_version


def current_version(*, config: ReleaseConfig) -> Result[Version, ReleaseError]:
    """Read the version the repository currently declares.

    The first match of `[version] pattern` in `[version] source` wins.
    """
    path = config.path(config.version.source)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"failed to read version source: {e}",
                hint=str(path),
            )
        )

    try:
        pattern = re.compile(config.version.pattern, re.MULTILINE)
    except re.error as e:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"invalid [version] pattern: {e}",
                hint=config.version.pattern,
            )
        )
    if pattern.groups != 1:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="[version] pattern must have exactly one capture group",
                hint=config.version.pattern,
            )
        )

    m = pattern.search(text)
    if m is None:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"no version found in {config.version.source}",
                hint=config.version.pattern,
            )
        )

    return parse_version(m.group(1))
