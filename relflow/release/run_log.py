from __future__ import annotations

import json
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal
from uuid import uuid4

from relflow.core.result import Err, Ok, Result
from relflow.core.structured import as_obj_list, as_str_dict, get_str
from relflow.platform.files import atomic_write_text
from relflow.release.errors import ReleaseError
from relflow.release.semver import Version

RUN_LOG_SCHEMA = 1

StageOutcome = Literal["ok", "failed"]


@dataclass(frozen=True, slots=True)
class StageRecord:
    name: str
    outcome: StageOutcome
    at: str
    error_kind: str | None = None
    message: str | None = None
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class RunLog:
    """Stage outcomes of the deploy runs for one version, oldest first."""

    version: str
    run_id: str
    started_at: str
    stages: tuple[StageRecord, ...] = ()

    def completed(self, stage: str) -> bool:
        return any(r.name == stage and r.outcome == "ok" for r in self.stages)

    def first_pending(self, order: tuple[str, ...]) -> str | None:
        for stage in order:
            if not self.completed(stage):
                return stage
        return None

    def record(
        self,
        stage: str,
        outcome: StageOutcome,
        *,
        error: ReleaseError | None = None,
        detail: str | None = None,
    ) -> RunLog:
        entry = StageRecord(
            name=stage,
            outcome=outcome,
            at=_now(),
            error_kind=error.kind if error is not None else None,
            message=error.pretty() if error is not None else None,
            detail=detail,
        )
        return replace(self, stages=(*self.stages, entry))


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


def run_log_path(*, state_dir: Path, version: Version) -> Path:
    return state_dir / "runs" / f"{version}.json"


def new_run_log(version: Version) -> RunLog:
    return RunLog(version=str(version), run_id=f"run-{uuid4().hex[:12]}", started_at=_now())


def save_run_log(*, state_dir: Path, log: RunLog) -> Result[None, ReleaseError]:
    path = state_dir / "runs" / f"{log.version}.json"
    payload: dict[str, object] = {
        "schema": RUN_LOG_SCHEMA,
        "version": log.version,
        "run_id": log.run_id,
        "started_at": log.started_at,
        "stages": [
            {
                "name": r.name,
                "outcome": r.outcome,
                "at": r.at,
                "error_kind": r.error_kind,
                "message": r.message,
                "detail": r.detail,
            }
            for r in log.stages
        ],
    }

    try:
        atomic_write_text(path, json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"failed to write run log: {e}",
                hint=str(path),
            )
        )
    return Ok(None)


def load_run_log(*, state_dir: Path, version: Version) -> Result[RunLog | None, ReleaseError]:
    path = run_log_path(state_dir=state_dir, version=version)
    if not path.exists():
        return Ok(None)

    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"failed to read run log: {e}",
                hint=str(path),
            )
        )

    data = as_str_dict(obj)
    if data is None or data.get("schema") != RUN_LOG_SCHEMA:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="unsupported run log format",
                hint=f"Delete {path} or rerun with --restart.",
            )
        )

    logged_version = get_str(data, "version")
    run_id = get_str(data, "run_id")
    started_at = get_str(data, "started_at")
    if logged_version != str(version) or run_id is None or started_at is None:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"run log does not belong to {version}",
                hint=str(path),
            )
        )

    stages: list[StageRecord] = []
    for item in as_obj_list(data.get("stages")) or []:
        d = as_str_dict(item)
        if d is None:
            continue
        name = get_str(d, "name")
        outcome = get_str(d, "outcome")
        at = get_str(d, "at")
        if name is None or at is None or outcome not in ("ok", "failed"):
            continue
        stages.append(
            StageRecord(
                name=name,
                outcome="ok" if outcome == "ok" else "failed",
                at=at,
                error_kind=get_str(d, "error_kind"),
                message=get_str(d, "message"),
                detail=get_str(d, "detail"),
            )
        )

    return Ok(
        RunLog(
            version=logged_version,
            run_id=run_id,
            started_at=started_at,
            stages=tuple(stages),
        )
    )
