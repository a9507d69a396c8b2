from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "missing_argument",
    "invalid_version",
    "patch_target_not_found",
    "missing_changelog",
    "duplicate_changelog_entry",
    "duplicate_tag",
    "duplicate_release",
    "lint_failed",
    "archive_build_failed",
    "missing_credential",
    "tool_failed",
    "invalid_input",
    "io_failed",
]

# Kinds raised by the preflight gates; the CLI maps them to one exit code.
GATE_KINDS: frozenset[str] = frozenset(
    {"duplicate_tag", "duplicate_release", "lint_failed", "archive_build_failed"}
)


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical error payload for every release operation.

    `hint` carries tool output verbatim or a pointer to the offending file.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


def missing_version_argument(command: str) -> ReleaseError:
    return ReleaseError(
        kind="missing_argument",
        message=f"missing version: {command} needs --version MAJOR.MINOR.PATCH",
    )
