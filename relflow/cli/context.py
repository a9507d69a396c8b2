from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relflow.cli.commands._helpers import exit_error, exit_release
from relflow.core.config import CONFIG_FILENAME, ReleaseConfig, find_root, load_config
from relflow.core.errors import ErrorCode
from relflow.core.result import Err
from relflow.output.console import ConsoleProtocol, RichConsole
from relflow.release.context import ReleaseContext
from relflow.release.credentials import Credentials, load_credentials


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: ReleaseConfig
    console: ConsoleProtocol

    def release_context(self, *, dry_run: bool) -> ReleaseContext:
        return ReleaseContext(
            config=self.config,
            credentials=self.credentials(),
            console=self.console,
            dry_run=dry_run,
        )

    def credentials(self) -> Credentials:
        loaded = load_credentials(config=self.config)
        if isinstance(loaded, Err):
            exit_release(loaded.error, console=self.console)
        return loaded.value


def build_context(*, root: Path | None) -> CLIContext:
    console = RichConsole()

    found = find_root(explicit=root)
    if isinstance(found, Err):
        exit_error(found.error.message, code=ErrorCode.USER_ERROR, console=console)

    loaded = load_config(found.value / CONFIG_FILENAME)
    if isinstance(loaded, Err):
        exit_error(loaded.error.message, code=ErrorCode.USER_ERROR, console=console)

    return CLIContext(config=loaded.value, console=console)


ROOT_OPTION = typer.Option(
    None,
    "--root",
    help=f"Repository root containing {CONFIG_FILENAME} (default: search upward).",
)
