"""Tests for external process invocation."""

import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

from gl_mirror.models import CommandStatus
from gl_mirror.runner import run_command


class TestRunCommand:
    def test_success(self):
        completed = subprocess.CompletedProcess(["git"], 0, stdout="", stderr="Cloning into 'svc-a'...\n")
        with patch("gl_mirror.runner.subprocess.run", return_value=completed) as mock_run:
            result = run_command(["git", "clone", "url", "team/svc-a"], cwd=Path("/tmp/root"))

        assert result.status is CommandStatus.SUCCESS
        assert result.ok
        assert result.returncode == 0
        assert "Cloning into" in result.stderr
        kwargs = mock_run.call_args.kwargs
        assert kwargs["cwd"] == Path("/tmp/root")
        assert kwargs["capture_output"] is True
        assert kwargs["timeout"] is None
        assert "check" not in kwargs

    def test_nonzero_exit(self):
        completed = subprocess.CompletedProcess(["git"], 128, stdout="", stderr="fatal: repository not found\n")
        with patch("gl_mirror.runner.subprocess.run", return_value=completed):
            result = run_command(["git", "clone"], cwd=Path("."))

        assert result.status is CommandStatus.NONZERO_EXIT
        assert result.returncode == 128
        assert result.describe() == "exit code 128: fatal: repository not found"

    def test_launch_failure(self):
        with patch("gl_mirror.runner.subprocess.run", side_effect=FileNotFoundError("No such file: 'git'")):
            result = run_command(["git", "clone"], cwd=Path("."))

        assert result.status is CommandStatus.LAUNCH_FAILED
        assert result.returncode is None
        assert "git" in result.describe()

    def test_timeout(self):
        with patch("gl_mirror.runner.subprocess.run", side_effect=subprocess.TimeoutExpired(["git"], 5)):
            result = run_command(["git", "clone"], cwd=Path("."), timeout=5)

        assert result.status is CommandStatus.LAUNCH_FAILED
        assert "timed out" in result.error

    def test_real_process_streams_captured(self, tmp_path):
        """Runs a real child process in the given directory."""
        script = "import os, sys; print(os.getcwd()); print('oops', file=sys.stderr); sys.exit(3)"
        result = run_command([sys.executable, "-c", script], cwd=tmp_path)

        assert result.status is CommandStatus.NONZERO_EXIT
        assert result.returncode == 3
        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()
        assert result.stderr.strip() == "oops"

    def test_missing_cwd_is_launch_failure(self, tmp_path):
        result = run_command(["git", "--version"], cwd=tmp_path / "does-not-exist")

        assert result.status is CommandStatus.LAUNCH_FAILED
