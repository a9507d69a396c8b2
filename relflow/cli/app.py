from __future__ import annotations

import typer

from relflow import __version__
from relflow.cli.commands.release_cmd import checks, deploy, next_version, release, runs
from relflow.cli.commands.version_cmd import bump, changelog, current

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Release automation: bump, changelog, gates, publish and next-version PR.",
)


# Version files and notes
app.command()(current)
app.command()(bump)
app.command()(changelog)

# Release stages
app.command()(checks)
app.command()(release)
app.command("next-version")(next_version)
app.command()(deploy)
app.command()(runs)


def _show_version(value: bool) -> None:
    # Eager, so it works without a subcommand.
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    show_version: bool = typer.Option(
        False,
        "--tool-version",
        callback=_show_version,
        is_eager=True,
        help="Show relflow's own version and exit.",
    ),
) -> None:
    del show_version


def main() -> None:
    app()
