from __future__ import annotations

from typing import NoReturn

import typer

from relflow.core.errors import ErrorCode
from relflow.core.result import Err
from relflow.output.console import ConsoleProtocol, Style
from relflow.release.errors import GATE_KINDS, ReleaseError, missing_version_argument
from relflow.release.semver import Version, parse_version


def release_error_code(kind: str) -> ErrorCode:
    if kind == "missing_credential":
        return ErrorCode.ENV_ERROR
    if kind in GATE_KINDS:
        return ErrorCode.GATE_FAILED
    if kind == "tool_failed":
        return ErrorCode.TOOL_ERROR
    if kind == "io_failed":
        return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR


def exit_error(message: str, *, code: ErrorCode, console: ConsoleProtocol) -> NoReturn:
    console.error(message)
    raise typer.Exit(code=int(code))


def exit_release(error: ReleaseError, *, console: ConsoleProtocol | None = None) -> NoReturn:
    if console is None:
        typer.echo(f"error: {error.message}", err=True)
        if error.hint:
            typer.echo(f"hint: {error.hint}", err=True)
    else:
        console.error(error.message)
        if error.hint:
            console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(release_error_code(error.kind)))


def require_version(raw: str | None, *, command: str) -> Version:
    """Parse --version, exiting before any work when it is absent or malformed."""
    if raw is None or not raw.strip():
        exit_release(missing_version_argument(command))
    parsed = parse_version(raw)
    if isinstance(parsed, Err):
        exit_release(parsed.error)
    return parsed.value


VERSION_OPTION = typer.Option(
    None,
    "--version",
    "-v",
    help="Release version, MAJOR.MINOR.PATCH (required).",
)
DRY_RUN_OPTION = typer.Option(
    False,
    "--dry-run",
    help="Print the commands and file edits without running them.",
)
