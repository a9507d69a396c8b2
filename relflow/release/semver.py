from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from relflow.core.result import Err, Ok, Result
from relflow.release.errors import ReleaseError

Ordering = Literal["less", "equal", "greater"]

_VERSION_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


@dataclass(frozen=True, slots=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise ValueError(f"negative version component: {self.major}.{self.minor}.{self.patch}")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_version(text: str) -> Result[Version, ReleaseError]:
    """Parse "MAJOR.MINOR.PATCH"; anything else is an invalid_version error."""
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"invalid version: {text!r}",
                hint="Expected MAJOR.MINOR.PATCH, e.g. 4.8.0",
            )
        )
    return Ok(Version(int(m.group(1)), int(m.group(2)), int(m.group(3))))


def compare(a: Version, b: Version) -> Ordering:
    if a < b:
        return "less"
    if a > b:
        return "greater"
    return "equal"


def next_development_version(released: Version) -> Version:
    # Always a minor bump after a release; patch and major bumps are manual.
    return Version(released.major, released.minor + 1, 0)
