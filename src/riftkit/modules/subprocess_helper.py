"""Run external tools without shell interpolation or pipe deadlocks.

Philosophy:
- Single responsibility: Run one command, capture everything
- Standard library only (no external dependencies)
- Never raises for a missing or failing command, the caller inspects the result

Public API (the "studs"):
    SubprocessResult: Captured exit code, output and timeout flag
    safe_run: Main execution function
"""

import logging
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127
TERMINATE_WAIT = 5


@dataclass
class SubprocessResult:
    """What a finished (or abandoned) command left behind."""

    returncode: int
    stdout: str
    stderr: str
    timed_out: bool

    @property
    def success(self) -> bool:
        """True when the command exited 0 within its timeout."""
        return self.returncode == 0 and not self.timed_out


class _PipeCollector(threading.Thread):
    """Daemon thread reading one pipe to EOF."""

    def __init__(self, pipe: IO[bytes]):
        super().__init__(daemon=True)
        self.pipe = pipe
        self.data = b""

    def run(self) -> None:
        try:
            self.data = self.pipe.read() or b""
        except (OSError, ValueError):
            # Closed while the process was being killed
            self.data = b""

    def text(self) -> str:
        self.join(timeout=1)
        return self.data.decode("utf-8", errors="replace")


def _feed_stdin(process: subprocess.Popen, input_text: str) -> None:
    try:
        process.stdin.write(input_text.encode("utf-8"))
        process.stdin.close()
    except OSError as e:
        logger.debug(f"Could not write stdin: {e}")


def _wait(process: subprocess.Popen, timeout: float | None) -> bool:
    """Wait for exit; on timeout terminate, then kill. True if it timed out."""
    try:
        process.wait(timeout=timeout)
        return False
    except subprocess.TimeoutExpired:
        process.terminate()
    try:
        process.wait(timeout=TERMINATE_WAIT)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()
    return True


def safe_run(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: float | None = 30,
    env: dict | None = None,
    input_text: str | None = None,
) -> SubprocessResult:
    """
    Run a command with stdout and stderr drained on background threads.

    Args:
        cmd: Command and arguments
        cwd: Working directory
        timeout: Timeout in seconds (None = no timeout)
        env: Environment variables
        input_text: Text written to the process stdin, then closed

    Returns:
        SubprocessResult; returncode is 127 when the command does not exist

    Example:
        >>> result = safe_run(["lsof", "-ti", ":3000"])
        >>> pids = result.stdout.split()
    """
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        process = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL if input_text is None else subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=env,
        )
    except FileNotFoundError:
        name = cmd[0] if cmd else "unknown"
        return SubprocessResult(COMMAND_NOT_FOUND, "", f"Command not found: {name}", False)
    except OSError as e:
        return SubprocessResult(1, "", f"Error executing command: {e!s}", False)

    out = _PipeCollector(process.stdout)
    err = _PipeCollector(process.stderr)
    out.start()
    err.start()

    if input_text is not None:
        _feed_stdin(process, input_text)

    timed_out = _wait(process, timeout)
    if timed_out:
        logger.debug(f"Command timed out after {timeout}s: {cmd[0]}")

    return SubprocessResult(
        returncode=-1 if process.returncode is None else process.returncode,
        stdout=out.text(),
        stderr=err.text(),
        timed_out=timed_out,
    )


__all__ = ["COMMAND_NOT_FOUND", "SubprocessResult", "safe_run"]
