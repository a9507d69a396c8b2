from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relflow.core.config import ReleaseConfig
from relflow.output.console import ConsoleProtocol
from relflow.release.credentials import Credentials


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Everything a release stage needs besides the version it works on."""

    config: ReleaseConfig
    credentials: Credentials
    console: ConsoleProtocol
    dry_run: bool = False

    @property
    def root(self) -> Path:
        return self.config.root

    @property
    def repo(self) -> str:
        return self.config.github.repo
