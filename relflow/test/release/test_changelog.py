from __future__ import annotations

from pathlib import Path

import pytest

from relflow.core.result import Err, Ok, Result
from relflow.output.console import MockConsole
from relflow.release.changelog import (
    ensure_changelog_entry,
    has_entry,
    merge_changelog,
    read_pending_changelog,
    render_changelog,
    retire_pending_changelog,
)
from relflow.release.errors import ReleaseError
from relflow.release.semver import Version

V500 = Version(5, 0, 0)


def _merge(
    tmp_path: Path, *, dry_run: bool = False, console: MockConsole | None = None
) -> Result[Path, ReleaseError]:
    return merge_changelog(
        version=V500,
        pending_path=tmp_path / "CHANGELOG.latest.md",
        cumulative_path=tmp_path / "CHANGELOG.md",
        console=console if console is not None else MockConsole(),
        dry_run=dry_run,
    )


class TestRender:
    def test_header_notes_blank_line_history(self) -> None:
        rendered = render_changelog(version=V500, pending="* Fixed bug\n", cumulative="## 4.9.0\n")
        assert rendered == "## 5.0.0\n* Fixed bug\n\n## 4.9.0\n"

    def test_adds_missing_trailing_newline(self) -> None:
        rendered = render_changelog(version=V500, pending="* Fixed bug", cumulative="")
        assert rendered == "## 5.0.0\n* Fixed bug\n\n"

    def test_has_entry_matches_whole_header(self) -> None:
        assert has_entry("## 5.0.0\n* x\n", V500)
        assert not has_entry("## 5.0.01\n", V500)
        assert not has_entry("## 15.0.0\n", V500)


class TestReadPending:
    def test_missing(self, tmp_path: Path) -> None:
        result = read_pending_changelog(path=tmp_path / "CHANGELOG.latest.md")
        assert isinstance(result, Err)
        assert result.error.kind == "missing_changelog"

    @pytest.mark.parametrize("content", ["", "   \n\n"])
    def test_blank(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "CHANGELOG.latest.md"
        path.write_text(content, encoding="utf-8")
        result = read_pending_changelog(path=path)
        assert isinstance(result, Err)
        assert result.error.kind == "missing_changelog"
        assert "empty" in result.error.message


class TestMerge:
    def test_prepends_under_version_header(self, tmp_path: Path) -> None:
        (tmp_path / "CHANGELOG.latest.md").write_text("* Fixed bug\n", encoding="utf-8")
        (tmp_path / "CHANGELOG.md").write_text("## 4.9.0\n* Older\n", encoding="utf-8")

        assert _merge(tmp_path) == Ok(tmp_path / "CHANGELOG.md")
        assert (tmp_path / "CHANGELOG.md").read_text(encoding="utf-8") == (
            "## 5.0.0\n* Fixed bug\n\n## 4.9.0\n* Older\n"
        )
        # The release description still needs the pending notes.
        assert (tmp_path / "CHANGELOG.latest.md").read_text(encoding="utf-8") == "* Fixed bug\n"

    def test_creates_cumulative_when_absent(self, tmp_path: Path) -> None:
        (tmp_path / "CHANGELOG.latest.md").write_text("* First\n", encoding="utf-8")
        assert isinstance(_merge(tmp_path), Ok)
        assert (tmp_path / "CHANGELOG.md").read_text(encoding="utf-8") == "## 5.0.0\n* First\n\n"

    def test_missing_pending_leaves_cumulative(self, tmp_path: Path) -> None:
        (tmp_path / "CHANGELOG.md").write_text("## 4.9.0\n", encoding="utf-8")
        result = _merge(tmp_path)
        assert isinstance(result, Err)
        assert result.error.kind == "missing_changelog"
        assert (tmp_path / "CHANGELOG.md").read_text(encoding="utf-8") == "## 4.9.0\n"

    def test_second_merge_is_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "CHANGELOG.latest.md").write_text("* Fixed bug\n", encoding="utf-8")
        (tmp_path / "CHANGELOG.md").write_text("", encoding="utf-8")
        assert isinstance(_merge(tmp_path), Ok)

        again = _merge(tmp_path)

        assert isinstance(again, Err)
        assert again.error.kind == "duplicate_changelog_entry"
        assert (tmp_path / "CHANGELOG.md").read_text(encoding="utf-8").count("## 5.0.0") == 1

    def test_dry_run(self, tmp_path: Path) -> None:
        (tmp_path / "CHANGELOG.latest.md").write_text("* Fixed bug\n", encoding="utf-8")
        (tmp_path / "CHANGELOG.md").write_text("## 4.9.0\n", encoding="utf-8")
        console = MockConsole()

        assert isinstance(_merge(tmp_path, dry_run=True, console=console), Ok)
        assert (tmp_path / "CHANGELOG.md").read_text(encoding="utf-8") == "## 4.9.0\n"
        assert console.find("as ## 5.0.0")


class TestEnsureEntry:
    def _ensure(self, tmp_path: Path, console: MockConsole) -> Result[Path, ReleaseError]:
        return ensure_changelog_entry(
            version=V500,
            pending_path=tmp_path / "CHANGELOG.latest.md",
            cumulative_path=tmp_path / "CHANGELOG.md",
            console=console,
            dry_run=False,
        )

    def test_merges_when_missing(self, tmp_path: Path) -> None:
        (tmp_path / "CHANGELOG.latest.md").write_text("* Fixed bug\n", encoding="utf-8")
        (tmp_path / "CHANGELOG.md").write_text("## 4.9.0\n", encoding="utf-8")

        assert isinstance(self._ensure(tmp_path, MockConsole()), Ok)
        assert (tmp_path / "CHANGELOG.md").read_text(encoding="utf-8") == (
            "## 5.0.0\n* Fixed bug\n\n## 4.9.0\n"
        )

    def test_existing_entry_is_left_alone(self, tmp_path: Path) -> None:
        (tmp_path / "CHANGELOG.latest.md").write_text("* Fixed bug\n", encoding="utf-8")
        (tmp_path / "CHANGELOG.md").write_text("## 5.0.0\n* Edited\n", encoding="utf-8")
        console = MockConsole()

        assert isinstance(self._ensure(tmp_path, console), Ok)
        assert (tmp_path / "CHANGELOG.md").read_text(encoding="utf-8") == "## 5.0.0\n* Edited\n"
        assert console.find("already has ## 5.0.0")


class TestRetire:
    def test_truncates(self, tmp_path: Path) -> None:
        path = tmp_path / "CHANGELOG.latest.md"
        path.write_text("* Fixed bug\n", encoding="utf-8")
        assert retire_pending_changelog(path=path, console=MockConsole(), dry_run=False) == Ok(None)
        assert path.read_text(encoding="utf-8") == ""

    def test_missing_is_fine(self, tmp_path: Path) -> None:
        path = tmp_path / "CHANGELOG.latest.md"
        assert retire_pending_changelog(path=path, console=MockConsole(), dry_run=False) == Ok(None)
        assert not path.exists()


def test_curated_example() -> None:
    rendered = render_changelog(
        version=Version(4, 8, 0), pending="- fixed bug", cumulative="## 4.7.0\nold notes"
    )
    assert rendered == "## 4.8.0\n- fixed bug\n\n## 4.7.0\nold notes"
