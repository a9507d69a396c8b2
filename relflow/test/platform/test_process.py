"""Tests for platform/process.py."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from relflow.core.result import Err, Ok
from relflow.platform import process as process_mod
from relflow.platform.process import ProcessError, run, run_streaming


class TestRun:
    def test_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)
        assert result == Ok("hello\n")

    def test_nonzero_exit(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"],
            cwd=tmp_path,
        )
        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert result.error.detail == "bad"

    def test_env_is_passed(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import os; print(os.environ['GH_TOKEN'])"],
            cwd=tmp_path,
            env={"GH_TOKEN": "secret", "PATH": ""},
        )
        assert result == Ok("secret\n")

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = run(["definitely-not-a-real-tool-xyz"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_run(*args: object, **kwargs: object) -> subprocess.CompletedProcess[str]:
            raise subprocess.TimeoutExpired(cmd="git", timeout=30)

        monkeypatch.setattr(process_mod.subprocess, "run", fake_run)
        result = run(["git", "status"], cwd=tmp_path, timeout=30)
        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr


class TestRunStreaming:
    def test_success(self, tmp_path: Path) -> None:
        assert run_streaming([sys.executable, "-c", "pass"], cwd=tmp_path) == Ok(None)

    def test_failure_carries_exit_status(self, tmp_path: Path) -> None:
        result = run_streaming([sys.executable, "-c", "raise SystemExit(2)"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 2
        assert str(result.error).endswith("failed (exit 2)")


def test_process_error_str_truncates_command() -> None:
    error = ProcessError(
        command=("pod", "lib", "lint", "--verbose", "Purchases.podspec"),
        returncode=1,
        stdout="",
        stderr="",
    )
    assert str(error) == "pod lib lint ... failed (exit 1)"
    assert error.detail == str(error)
