"""The deploy pipeline: preflight, changelog, publish, release, next version.

Stages run strictly in order and each one gates the next. Outcomes are
appended to a run log under `.relflow/runs/<version>.json`; a later deploy
of the same version resumes at the first stage without an `ok` record.
Nothing is rolled back: published pods, tags and releases stay as they are.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Literal

from relflow.core.config import ReleaseConfig
from relflow.core.result import Err, Ok, Result
from relflow.output.console import ConsoleProtocol, Style
from relflow.release.changelog import ensure_changelog_entry
from relflow.release.context import ReleaseContext
from relflow.release.credentials import Credentials
from relflow.release.errors import ReleaseError
from relflow.release.next_version import NextVersion, check_clean_tree, prepare_next_version
from relflow.release.preflight import DEFAULT_GATES, GateName, run_preflight
from relflow.release.publisher import (
    ReleaseRecord,
    github_release,
    publish_packages,
    rebuild_archive,
)
from relflow.release.run_log import RunLog, load_run_log, new_run_log, save_run_log
from relflow.release.semver import Version

StageName = Literal[
    "preflight",
    "changelog",
    "publish_packages",
    "build_archive",
    "github_release",
    "prepare_next_version",
]

STAGES: tuple[StageName, ...] = (
    "preflight",
    "changelog",
    "publish_packages",
    "build_archive",
    "github_release",
    "prepare_next_version",
)


def _empty_stages() -> list[StageName]:
    return []


@dataclass
class DeployOutcome:
    version: Version
    executed: list[StageName] = field(default_factory=_empty_stages)
    skipped: list[StageName] = field(default_factory=_empty_stages)
    release: ReleaseRecord | None = None
    next_version: NextVersion | None = None


StageHandler = Callable[[Version, DeployOutcome], Result[str | None, ReleaseError]]


class ReleasePipeline:
    """Runs the deploy stages for one repository.

    Attributes:
        context: Config, credentials and console shared by every stage.
        gates: Preflight gates, in execution order.
    """

    def __init__(
        self,
        *,
        config: ReleaseConfig,
        credentials: Credentials,
        console: ConsoleProtocol,
        dry_run: bool = False,
        gates: tuple[GateName, ...] = DEFAULT_GATES,
    ) -> None:
        self.context = ReleaseContext(
            config=config, credentials=credentials, console=console, dry_run=dry_run
        )
        self.gates = gates

    @property
    def handlers(self) -> Mapping[StageName, StageHandler]:
        return {
            "preflight": self._preflight,
            "changelog": self._changelog,
            "publish_packages": self._publish_packages,
            "build_archive": self._build_archive,
            "github_release": self._github_release,
            "prepare_next_version": self._prepare_next_version,
        }

    def deploy(
        self, version: Version, *, restart: bool = False
    ) -> Result[DeployOutcome, ReleaseError]:
        """Release `version`, resuming a previous interrupted run unless `restart`."""
        ctx = self.context
        console = ctx.console
        state_dir = ctx.config.state_dir

        log = new_run_log(version)
        if not restart:
            loaded = load_run_log(state_dir=state_dir, version=version)
            if isinstance(loaded, Err):
                return loaded
            if loaded.value is not None:
                log = loaded.value

        pending = log.first_pending(STAGES)
        if pending is None:
            console.info(f"{version} was already released (run {log.run_id})")
            return Ok(DeployOutcome(version=version, skipped=list(STAGES)))
        if log.stages:
            console.info(f"resuming {log.run_id} at stage {pending}")

        outcome = DeployOutcome(version=version)
        for stage in STAGES:
            if log.completed(stage):
                console.print(f"skip {stage} (done in {log.run_id})", Style.DIM)
                outcome.skipped.append(stage)
                continue

            console.header(f"Stage: {stage}")
            result = self.handlers[stage](version, outcome)
            if isinstance(result, Err):
                saved = self._save(log.record(stage, "failed", error=result.error))
                if isinstance(saved, Err):
                    console.error(saved.error.pretty())
                return result

            outcome.executed.append(stage)
            log = log.record(stage, "ok", detail=result.value)
            saved = self._save(log)
            if isinstance(saved, Err):
                return saved

        console.success(f"released {version}")
        return Ok(outcome)

    def _save(self, log: RunLog) -> Result[None, ReleaseError]:
        if self.context.dry_run:
            return Ok(None)
        return save_run_log(state_dir=self.context.config.state_dir, log=log)

    def _preflight(
        self, version: Version, outcome: DeployOutcome
    ) -> Result[str | None, ReleaseError]:
        del outcome
        # prepare_next_version commits with -am; catch stray edits before publishing.
        clean = check_clean_tree(self.context)
        if isinstance(clean, Err):
            return clean
        return run_preflight(self.context, version, gates=self.gates).map(lambda _: None)

    def _changelog(
        self, version: Version, outcome: DeployOutcome
    ) -> Result[str | None, ReleaseError]:
        del outcome
        config = self.context.config
        return ensure_changelog_entry(
            version=version,
            pending_path=config.pending_changelog_path,
            cumulative_path=config.cumulative_changelog_path,
            console=self.context.console,
            dry_run=self.context.dry_run,
        ).map(lambda _: None)

    def _publish_packages(
        self, version: Version, outcome: DeployOutcome
    ) -> Result[str | None, ReleaseError]:
        del version, outcome
        return publish_packages(self.context).map(lambda _: None)

    def _build_archive(
        self, version: Version, outcome: DeployOutcome
    ) -> Result[str | None, ReleaseError]:
        del version, outcome
        return rebuild_archive(self.context).map(lambda _: None)

    def _github_release(
        self, version: Version, outcome: DeployOutcome
    ) -> Result[str | None, ReleaseError]:
        record = github_release(self.context, version)
        if isinstance(record, Err):
            return record
        outcome.release = record.value
        return Ok(record.value.url)

    def _prepare_next_version(
        self, version: Version, outcome: DeployOutcome
    ) -> Result[str | None, ReleaseError]:
        prepared = prepare_next_version(self.context, version)
        if isinstance(prepared, Err):
            return prepared
        outcome.next_version = prepared.value
        return Ok(prepared.value.pr_url)
