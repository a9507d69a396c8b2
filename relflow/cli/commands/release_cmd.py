from __future__ import annotations

from pathlib import Path

import typer

from relflow.cli.commands._helpers import (
    DRY_RUN_OPTION,
    VERSION_OPTION,
    exit_release,
    require_version,
)
from relflow.cli.context import ROOT_OPTION, build_context
from relflow.core.result import Err
from relflow.output.console import Style
from relflow.release.next_version import prepare_next_version
from relflow.release.pipeline import ReleasePipeline
from relflow.release.preflight import DEFAULT_GATES, GATES, GateName, run_preflight
from relflow.release.publisher import github_release
from relflow.release.run_log import load_run_log


def _parse_gates(names: list[str]) -> tuple[GateName, ...]:
    if not names:
        return DEFAULT_GATES
    out: list[GateName] = []
    for name in names:
        gate = next((g for g in GATES if g == name), None)
        if gate is None:
            typer.echo(
                f"error: unknown gate {name!r} (choose from {', '.join(DEFAULT_GATES)})",
                err=True,
            )
            raise typer.Exit(code=1)
        out.append(gate)
    return tuple(out)


def checks(
    version: str | None = VERSION_OPTION,
    gate: list[str] = typer.Option(
        [], "--gate", help="Run only these gates, in this order (repeatable)."
    ),
    root: Path | None = ROOT_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Run the preflight gates without publishing anything."""
    target = require_version(version, command="checks")
    gates = _parse_gates(gate)
    ctx = build_context(root=root)
    rctx = ctx.release_context(dry_run=dry_run)

    passed = run_preflight(rctx, target, gates=gates)
    if isinstance(passed, Err):
        exit_release(passed.error, console=ctx.console)
    ctx.console.success(f"{target} is ready to release")


def release(
    version: str | None = VERSION_OPTION,
    root: Path | None = ROOT_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Create the GitHub release and upload the archive."""
    target = require_version(version, command="release")
    ctx = build_context(root=root)
    rctx = ctx.release_context(dry_run=dry_run)

    record = github_release(rctx, target)
    if isinstance(record, Err):
        exit_release(record.error, console=ctx.console)
    ctx.console.success(f"release {record.value.name}: {record.value.url}")


def next_version(
    version: str | None = VERSION_OPTION,
    root: Path | None = ROOT_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Branch, bump and open the PR for the version after --version."""
    released = require_version(version, command="next-version")
    ctx = build_context(root=root)
    rctx = ctx.release_context(dry_run=dry_run)

    prepared = prepare_next_version(rctx, released)
    if isinstance(prepared, Err):
        exit_release(prepared.error, console=ctx.console)
    ctx.console.success(f"{prepared.value.branch}: {prepared.value.pr_url}")


def deploy(
    version: str | None = VERSION_OPTION,
    restart: bool = typer.Option(
        False, "--restart", help="Ignore the run log and start from the first stage."
    ),
    root: Path | None = ROOT_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Preflight, merge the changelog, publish, release and prepare the next version."""
    target = require_version(version, command="deploy")
    ctx = build_context(root=root)

    pipeline = ReleasePipeline(
        config=ctx.config,
        credentials=ctx.credentials(),
        console=ctx.console,
        dry_run=dry_run,
    )
    outcome = pipeline.deploy(target, restart=restart)
    if isinstance(outcome, Err):
        exit_release(outcome.error, console=ctx.console)

    done = outcome.value
    if done.release is not None:
        ctx.console.print(f"release: {done.release.url}", Style.DIM)
    if done.next_version is not None:
        ctx.console.print(f"next version PR: {done.next_version.pr_url}", Style.DIM)


def runs(
    version: str | None = VERSION_OPTION,
    root: Path | None = ROOT_OPTION,
) -> None:
    """Show the recorded deploy stages for a version."""
    target = require_version(version, command="runs")
    ctx = build_context(root=root)

    loaded = load_run_log(state_dir=ctx.config.state_dir, version=target)
    if isinstance(loaded, Err):
        exit_release(loaded.error, console=ctx.console)
    log = loaded.value
    if log is None:
        ctx.console.info(f"no deploy recorded for {target}")
        return

    ctx.console.header(f"{log.version} ({log.run_id}, started {log.started_at})")
    for record in log.stages:
        line = f"{record.at}  {record.name:<22} {record.outcome}"
        if record.outcome == "ok":
            ctx.console.print(line + (f"  {record.detail}" if record.detail else ""))
        else:
            ctx.console.print(f"{line}  [{record.error_kind}] {record.message}", Style.WARNING)
