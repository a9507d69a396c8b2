from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from relflow.core.config import ReleaseConfig
from relflow.core.result import Err, Ok, Result
from relflow.release.errors import ReleaseError


@dataclass(frozen=True, slots=True)
class Credentials:
    """Secrets the pipeline needs, resolved once before any stage runs."""

    github_token: str = field(repr=False)

    def gh_env(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Environment for `gh` with the token passed explicitly."""
        env = dict(os.environ if base is None else base)
        env["GH_TOKEN"] = self.github_token
        return env


def required_credential_vars(config: ReleaseConfig) -> tuple[str, ...]:
    return (config.github.token_env,)


def load_credentials(
    *, config: ReleaseConfig, environ: Mapping[str, str] | None = None
) -> Result[Credentials, ReleaseError]:
    """Resolve every required credential or fail naming the missing ones."""
    env = os.environ if environ is None else environ
    missing = [name for name in required_credential_vars(config) if not env.get(name, "").strip()]
    if missing:
        return Err(
            ReleaseError(
                kind="missing_credential",
                message=f"missing credential: {', '.join(missing)}",
                hint="Export a GitHub token with repo scope, e.g. GITHUB_TOKEN=...",
            )
        )
    return Ok(Credentials(github_token=env[config.github.token_env].strip()))
