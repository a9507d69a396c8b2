"""Typed loading of `relflow.toml`.

The release configuration lives at the repository root and describes which
files carry the version, where the changelogs are, which package manifests
get linted and published, and which GitHub repository receives the release.

Example:

    [github]
    repo = "acme/purchases-ios"
    integration_branch = "develop"

    [version]
    source = "Purchases.podspec"
    files = ["Purchases.podspec", "PurchasesCoreSwift.podspec", "Purchases/Info.plist"]

    [[manifests]]
    path = "PurchasesCoreSwift.podspec"

    [[manifests]]
    path = "Purchases.podspec"
    include = ["PurchasesCoreSwift.podspec"]
    synchronous = true

    [archive]
    product = "Purchases"
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_list,
    get_raw_str,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "CONFIG_FILENAME",
    "ROOT_ENV_VAR",
    "ArchiveConfig",
    "ChangelogConfig",
    "ConfigError",
    "GithubConfig",
    "ManifestConfig",
    "NextVersionConfig",
    "ReleaseConfig",
    "VersionConfig",
    "find_root",
    "load_config",
]

CONFIG_FILENAME = "relflow.toml"
ROOT_ENV_VAR = "RELFLOW_ROOT"

DEFAULT_VERSION_PATTERN = r"""version\s*=\s*["']?(\d+\.\d+\.\d+)"""


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the config cannot be found, loaded or validated."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class GithubConfig:
    repo: str
    token_env: str = "GITHUB_TOKEN"
    release_branch: str = "main"
    integration_branch: str = "develop"


@dataclass(frozen=True, slots=True)
class VersionConfig:
    """Where the version lives and how bumps rewrite it.

    Attributes:
        source: File the current version is read from.
        pattern: Regex with one capture group selecting the version in `source`.
        files: Files whose first occurrence of the previous version is replaced.
        backup_suffix: Suffix of the backup copy left next to each patched file
            (empty disables backups).
        validate_first: Check every file for the previous version before
            writing any of them.
    """

    source: str
    files: tuple[str, ...]
    pattern: str = DEFAULT_VERSION_PATTERN
    backup_suffix: str = ".bck"
    validate_first: bool = True


@dataclass(frozen=True, slots=True)
class ChangelogConfig:
    pending: str = "CHANGELOG.latest.md"
    cumulative: str = "CHANGELOG.md"


@dataclass(frozen=True, slots=True)
class ManifestConfig:
    """A package manifest that is linted before and published during a release."""

    path: str
    include: tuple[str, ...] = ()
    synchronous: bool = False


@dataclass(frozen=True, slots=True)
class ArchiveConfig:
    product: str
    asset: str

    @classmethod
    def for_product(cls, product: str) -> ArchiveConfig:
        return cls(product=product, asset=f"{product}.framework.zip")


@dataclass(frozen=True, slots=True)
class NextVersionConfig:
    branch_prefix: str = "bump/"
    commit_message: str = "Preparing for next version"


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Root configuration object; paths are relative to `root`."""

    root: Path
    github: GithubConfig
    version: VersionConfig
    archive: ArchiveConfig
    changelog: ChangelogConfig = field(default_factory=ChangelogConfig)
    manifests: tuple[ManifestConfig, ...] = ()
    next_version: NextVersionConfig = field(default_factory=NextVersionConfig)

    def path(self, rel: str) -> Path:
        return self.root / rel

    @property
    def pending_changelog_path(self) -> Path:
        return self.path(self.changelog.pending)

    @property
    def cumulative_changelog_path(self) -> Path:
        return self.path(self.changelog.cumulative)

    @property
    def asset_path(self) -> Path:
        return self.path(self.archive.asset)

    @property
    def state_dir(self) -> Path:
        return self.root / ".relflow"

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, root: Path) -> Result[ReleaseConfig, str]:
        """Build a ReleaseConfig from parsed TOML.

        Returns Err(message) describing the first invalid or missing key.
        """
        github: StrDict = get_table(data, "github") or {}
        version: StrDict = get_table(data, "version") or {}
        changelog: StrDict = get_table(data, "changelog") or {}
        archive: StrDict = get_table(data, "archive") or {}
        next_version: StrDict = get_table(data, "next_version") or {}

        repo = get_str(github, "repo")
        if repo is None or "/" not in repo:
            return Err("[github] repo must be set as 'owner/name'")

        files = get_str_list(version, "files")
        if not files:
            return Err("[version] files must list at least one file")

        product = get_str(archive, "product")
        if product is None:
            return Err("[archive] product must be set")

        manifests: list[ManifestConfig] = []
        for item in get_list(data, "manifests") or []:
            table = as_str_dict(item)
            path = get_str(table, "path") if table is not None else None
            if table is None or path is None:
                return Err("each [[manifests]] entry needs a path")
            include = get_str_list(table, "include")
            if include is None and "include" in table:
                return Err(f"[[manifests]] include must be a list of paths: {path}")
            manifests.append(
                ManifestConfig(
                    path=path,
                    include=tuple(include or ()),
                    synchronous=get_bool(table, "synchronous") or False,
                )
            )

        backup_suffix = get_raw_str(version, "backup_suffix")
        validate_first = get_bool(version, "validate_first")
        asset = get_str(archive, "asset")

        return Ok(
            cls(
                root=root,
                github=GithubConfig(
                    repo=repo,
                    token_env=get_str(github, "token_env") or "GITHUB_TOKEN",
                    release_branch=get_str(github, "release_branch") or "main",
                    integration_branch=get_str(github, "integration_branch") or "develop",
                ),
                version=VersionConfig(
                    source=get_str(version, "source") or files[0],
                    files=tuple(files),
                    pattern=get_str(version, "pattern") or DEFAULT_VERSION_PATTERN,
                    backup_suffix=".bck" if backup_suffix is None else backup_suffix.strip(),
                    validate_first=True if validate_first is None else validate_first,
                ),
                archive=(
                    ArchiveConfig(product=product, asset=asset)
                    if asset is not None
                    else ArchiveConfig.for_product(product)
                ),
                changelog=ChangelogConfig(
                    pending=get_str(changelog, "pending") or "CHANGELOG.latest.md",
                    cumulative=get_str(changelog, "cumulative") or "CHANGELOG.md",
                ),
                manifests=tuple(manifests),
                next_version=NextVersionConfig(
                    branch_prefix=get_raw_str(next_version, "branch_prefix") or "bump/",
                    commit_message=get_str(next_version, "commit_message")
                    or "Preparing for next version",
                ),
            )
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and validate `relflow.toml`.

    Args:
        path: Path to the config file; its directory becomes the release root.

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure.
    """
    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed

    built = ReleaseConfig.from_dict(parsed.value, root=path.parent)
    if isinstance(built, Err):
        return Err(ConfigError(f"Invalid config: {built.error}", path=path))
    return Ok(built.value)


def find_root(
    *,
    explicit: Path | None = None,
    start: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Result[Path, ConfigError]:
    """Locate the repository root holding `relflow.toml`.

    Resolution order: explicit path, `RELFLOW_ROOT`, then an upward search
    from `start` (defaults to the current directory).
    """
    env = os.environ if environ is None else environ

    pinned = explicit
    if pinned is None and env.get(ROOT_ENV_VAR):
        pinned = Path(env[ROOT_ENV_VAR])

    if pinned is not None:
        root = pinned.expanduser().resolve()
        if (root / CONFIG_FILENAME).is_file():
            return Ok(root)
        return Err(
            ConfigError(f"{CONFIG_FILENAME} not found in {root}", path=root / CONFIG_FILENAME)
        )

    here = (start or Path.cwd()).resolve()
    for parent in (here, *here.parents):
        if (parent / CONFIG_FILENAME).is_file():
            return Ok(parent)

    return Err(ConfigError(f"{CONFIG_FILENAME} not found in {here} or any parent directory"))
