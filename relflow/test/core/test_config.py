"""Tests for relflow.core.config module."""

from __future__ import annotations

from pathlib import Path

from relflow.core.config import (
    CONFIG_FILENAME,
    DEFAULT_VERSION_PATTERN,
    ROOT_ENV_VAR,
    ReleaseConfig,
    find_root,
    load_config,
)
from relflow.core.result import Err, Ok

MINIMAL = """
[github]
repo = "acme/purchases-ios"

[version]
files = ["Purchases.podspec"]

[archive]
product = "Purchases"
"""


def _write(root: Path, text: str) -> Path:
    path = root / CONFIG_FILENAME
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_minimal_config_uses_defaults(self, tmp_path: Path) -> None:
        result = load_config(_write(tmp_path, MINIMAL))
        assert isinstance(result, Ok)
        config = result.value

        assert config.root == tmp_path
        assert config.github.repo == "acme/purchases-ios"
        assert config.github.token_env == "GITHUB_TOKEN"
        assert config.github.release_branch == "main"
        assert config.github.integration_branch == "develop"
        assert config.version.source == "Purchases.podspec"
        assert config.version.pattern == DEFAULT_VERSION_PATTERN
        assert config.version.backup_suffix == ".bck"
        assert config.version.validate_first is True
        assert config.archive.asset == "Purchases.framework.zip"
        assert config.manifests == ()
        assert config.next_version.branch_prefix == "bump/"
        assert config.pending_changelog_path == tmp_path / "CHANGELOG.latest.md"
        assert config.cumulative_changelog_path == tmp_path / "CHANGELOG.md"
        assert config.state_dir == tmp_path / ".relflow"

    def test_full_config(self, tmp_path: Path) -> None:
        text = """
[github]
repo = "acme/purchases-ios"
token_env = "RELEASE_TOKEN"
release_branch = "release"
integration_branch = "main"

[version]
source = "Purchases/Info.plist"
files = ["Purchases.podspec", "Purchases/Info.plist"]
pattern = "<string>(\\\\d+\\\\.\\\\d+\\\\.\\\\d+)</string>"
backup_suffix = ""
validate_first = false

[changelog]
pending = "NOTES.md"
cumulative = "HISTORY.md"

[[manifests]]
path = "Core.podspec"
synchronous = true

[[manifests]]
path = "Purchases.podspec"
include = ["Core.podspec"]

[archive]
product = "Purchases"
asset = "build/Purchases.zip"

[next_version]
branch_prefix = "release/next-"
commit_message = "Start next cycle"
"""
        result = load_config(_write(tmp_path, text))
        assert isinstance(result, Ok)
        config = result.value

        assert config.github.token_env == "RELEASE_TOKEN"
        assert config.github.release_branch == "release"
        assert config.version.source == "Purchases/Info.plist"
        assert config.version.pattern == r"<string>(\d+\.\d+\.\d+)</string>"
        assert config.version.backup_suffix == ""
        assert config.version.validate_first is False
        assert config.changelog.pending == "NOTES.md"
        assert [m.path for m in config.manifests] == ["Core.podspec", "Purchases.podspec"]
        assert config.manifests[0].synchronous is True
        assert config.manifests[1].include == ("Core.podspec",)
        assert config.asset_path == tmp_path / "build" / "Purchases.zip"
        assert config.next_version.commit_message == "Start next cycle"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / CONFIG_FILENAME)
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        result = load_config(_write(tmp_path, "[github\nrepo ="))
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message


class TestValidation:
    def test_repo_requires_owner(self, tmp_path: Path) -> None:
        result = ReleaseConfig.from_dict(
            {
                "github": {"repo": "purchases"},
                "version": {"files": ["a"]},
                "archive": {"product": "P"},
            },
            root=tmp_path,
        )
        assert isinstance(result, Err)
        assert "owner/name" in result.error

    def test_files_required(self, tmp_path: Path) -> None:
        result = ReleaseConfig.from_dict(
            {"github": {"repo": "a/b"}, "version": {"files": []}, "archive": {"product": "P"}},
            root=tmp_path,
        )
        assert isinstance(result, Err)
        assert "[version] files" in result.error

    def test_archive_product_required(self, tmp_path: Path) -> None:
        result = ReleaseConfig.from_dict(
            {"github": {"repo": "a/b"}, "version": {"files": ["a"]}}, root=tmp_path
        )
        assert isinstance(result, Err)
        assert "[archive] product" in result.error

    def test_manifest_needs_path(self, tmp_path: Path) -> None:
        result = ReleaseConfig.from_dict(
            {
                "github": {"repo": "a/b"},
                "version": {"files": ["a"]},
                "archive": {"product": "P"},
                "manifests": [{"include": ["x"]}],
            },
            root=tmp_path,
        )
        assert isinstance(result, Err)
        assert "needs a path" in result.error

    def test_manifest_include_must_be_list(self, tmp_path: Path) -> None:
        result = ReleaseConfig.from_dict(
            {
                "github": {"repo": "a/b"},
                "version": {"files": ["a"]},
                "archive": {"product": "P"},
                "manifests": [{"path": "A.podspec", "include": "B.podspec"}],
            },
            root=tmp_path,
        )
        assert isinstance(result, Err)
        assert "include must be a list" in result.error


class TestFindRoot:
    def test_explicit_root(self, tmp_path: Path) -> None:
        _write(tmp_path, MINIMAL)
        assert find_root(explicit=tmp_path, environ={}) == Ok(tmp_path.resolve())

    def test_explicit_root_without_config(self, tmp_path: Path) -> None:
        result = find_root(explicit=tmp_path, environ={})
        assert isinstance(result, Err)
        assert CONFIG_FILENAME in result.error.message

    def test_env_var(self, tmp_path: Path) -> None:
        _write(tmp_path, MINIMAL)
        result = find_root(environ={ROOT_ENV_VAR: str(tmp_path)})
        assert result == Ok(tmp_path.resolve())

    def test_upward_search(self, tmp_path: Path) -> None:
        _write(tmp_path, MINIMAL)
        nested = tmp_path / "Sources" / "Purchases"
        nested.mkdir(parents=True)
        assert find_root(start=nested, environ={}) == Ok(tmp_path.resolve())

    def test_upward_search_fails(self, tmp_path: Path) -> None:
        result = find_root(start=tmp_path, environ={})
        assert isinstance(result, Err)
        assert "any parent directory" in result.error.message
