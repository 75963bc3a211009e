"""Tests for system/process.py."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from gitflow.core.result import Err, Ok
from gitflow.system.process import ProcessError, run


class TestRun:
    @patch("subprocess.run")
    def test_success_returns_stdout(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=["git", "status"], returncode=0, stdout="ok\n", stderr=""
        )
        assert run(["git", "status"], cwd=tmp_path) == Ok("ok\n")
        assert mock_run.call_args.kwargs["cwd"] == str(tmp_path)
        assert mock_run.call_args.kwargs["check"] is False

    @patch("subprocess.run")
    def test_non_zero_exit(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=["git", "push"], returncode=1, stdout="", stderr="rejected\n"
        )
        result = run(["git", "push"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 1
        assert result.error.diagnostic == "rejected"

    @patch("subprocess.run")
    def test_timeout(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["git", "fetch"], timeout=5)
        result = run(["git", "fetch"], cwd=tmp_path, timeout=5)
        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr


class TestProcessError:
    def test_diagnostic_falls_back_to_stdout(self) -> None:
        err = ProcessError(command=("git", "merge"), returncode=1, stdout="CONFLICT", stderr="  ")
        assert err.diagnostic == "CONFLICT"

    def test_str_truncates_command(self) -> None:
        err = ProcessError(
            command=("git", "-C", "/repo", "status"), returncode=2, stdout="", stderr=""
        )
        assert str(err) == "git -C /repo ... failed (exit 2)"
