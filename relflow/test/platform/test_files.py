from __future__ import annotations

from pathlib import Path

from relflow.platform.files import atomic_write_text, backup_copy


def test_atomic_write_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / ".relflow" / "runs" / "5.0.0.json"
    atomic_write_text(target, "{}\n")
    assert target.read_text(encoding="utf-8") == "{}\n"
    assert [p.name for p in target.parent.iterdir()] == ["5.0.0.json"]


def test_atomic_write_replaces(tmp_path: Path) -> None:
    target = tmp_path / "CHANGELOG.md"
    target.write_text("old", encoding="utf-8")
    atomic_write_text(target, "new")
    assert target.read_text(encoding="utf-8") == "new"


def test_backup_copy_appends_suffix(tmp_path: Path) -> None:
    source = tmp_path / "Purchases.podspec"
    source.write_text('s.version = "4.7.3"', encoding="utf-8")

    backup = backup_copy(source, ".bck")

    assert backup == tmp_path / "Purchases.podspec.bck"
    assert backup.read_text(encoding="utf-8") == 's.version = "4.7.3"'
