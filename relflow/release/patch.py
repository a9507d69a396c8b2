from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from relflow.core.result import Err, Ok, Result
from relflow.output.console import ConsoleProtocol, Style
from relflow.platform.files import atomic_write_text, backup_copy
from relflow.release.errors import ReleaseError


@dataclass(frozen=True, slots=True)
class PatchTarget:
    """Replace the first `previous` in `path` with `new`."""

    path: Path
    previous: str
    new: str


@dataclass(frozen=True, slots=True)
class PatchReport:
    patched: tuple[Path, ...]
    backups: tuple[Path, ...]


def patch_targets(
    *, root: Path, files: Iterable[str], previous: str, new: str
) -> tuple[PatchTarget, ...]:
    return tuple(PatchTarget(path=root / rel, previous=previous, new=new) for rel in files)


def substitute_first(text: str, *, previous: str, new: str) -> str | None:
    """Exact-text replacement of the first occurrence; None if absent."""
    idx = text.find(previous)
    if idx < 0:
        return None
    return text[:idx] + new + text[idx + len(previous) :]


def apply_patch_set(
    *,
    targets: tuple[PatchTarget, ...],
    backup_suffix: str,
    validate_first: bool,
    console: ConsoleProtocol,
    dry_run: bool,
) -> Result[PatchReport, ReleaseError]:
    """Rewrite the version token in every target file.

    With `validate_first`, every file is read and checked before anything is
    written, so a missing token leaves the whole set untouched. Without it,
    files are patched in order and a missing token stops the run with the
    earlier files already rewritten (and their backups in place).
    """
    if validate_first:
        contents: list[tuple[PatchTarget, str]] = []
        missing: list[PatchTarget] = []
        for target in targets:
            text = _read(target.path)
            if isinstance(text, Err):
                return text
            if target.previous not in text.value:
                missing.append(target)
            contents.append((target, text.value))

        if missing:
            return Err(_not_found(missing, patched=()))

        return _write_all(contents, backup_suffix=backup_suffix, console=console, dry_run=dry_run)

    patched: list[Path] = []
    backups: list[Path] = []
    for target in targets:
        text = _read(target.path)
        if isinstance(text, Err):
            return text
        if target.previous not in text.value:
            return Err(_not_found([target], patched=tuple(patched)))

        written = _write_all(
            [(target, text.value)], backup_suffix=backup_suffix, console=console, dry_run=dry_run
        )
        if isinstance(written, Err):
            return written
        patched.extend(written.value.patched)
        backups.extend(written.value.backups)

    return Ok(PatchReport(patched=tuple(patched), backups=tuple(backups)))


def _write_all(
    contents: list[tuple[PatchTarget, str]],
    *,
    backup_suffix: str,
    console: ConsoleProtocol,
    dry_run: bool,
) -> Result[PatchReport, ReleaseError]:
    patched: list[Path] = []
    backups: list[Path] = []
    for target, text in contents:
        console.print(f"patch {target.path.name}: {target.previous} -> {target.new}", Style.DIM)
        if dry_run:
            continue

        updated = substitute_first(text, previous=target.previous, new=target.new)
        # Checked by the caller before reaching here.
        assert updated is not None

        try:
            if backup_suffix:
                backups.append(backup_copy(target.path, backup_suffix))
            atomic_write_text(target.path, updated, encoding="utf-8")
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="io_failed",
                    message=f"failed to patch {target.path.name}: {e}",
                    hint=str(target.path),
                )
            )
        patched.append(target.path)

    return Ok(PatchReport(patched=tuple(patched), backups=tuple(backups)))


def _read(path: Path) -> Result[str, ReleaseError]:
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"failed to read {path.name}: {e}",
                hint=str(path),
            )
        )


def _not_found(missing: list[PatchTarget], *, patched: tuple[Path, ...]) -> ReleaseError:
    names = ", ".join(str(t.path) for t in missing)
    hint = f"expected {missing[0].previous!r} in each file"
    if patched:
        hint += "; already patched: " + ", ".join(str(p) for p in patched)
    return ReleaseError(
        kind="patch_target_not_found",
        message=f"version {missing[0].previous} not found in: {names}",
        hint=hint,
    )
