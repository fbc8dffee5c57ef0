"""External process invocation."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from gl_mirror.models import CommandResult, CommandStatus

logger = logging.getLogger("gl-mirror")


def run_command(command: list[str], cwd: Path, timeout: float | None = None) -> CommandResult:
    """
    Run ``command`` in ``cwd`` and wait for it to exit.

    Both output streams are captured in full. The exit code is reported, never
    raised: a failed launch or a timeout comes back as ``LAUNCH_FAILED``.
    """
    logger.debug(f"exec (cwd={cwd}): {' '.join(command)}")
    try:
        proc = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        return CommandResult(status=CommandStatus.LAUNCH_FAILED, error=f"timed out after {e.timeout}s")
    except OSError as e:
        return CommandResult(status=CommandStatus.LAUNCH_FAILED, error=str(e))

    status = CommandStatus.SUCCESS if proc.returncode == 0 else CommandStatus.NONZERO_EXIT
    return CommandResult(status=status, returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)
