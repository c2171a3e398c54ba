"""Subprocess execution with Result-based error handling.

Two flavours are provided:

- ``run`` captures output; used for git queries and commits.
- ``run_streaming`` lets the child write straight to the terminal; used for
  restore/test/build/pack/publish so their progress stays visible.

Usage:
    match run(["git", "status", "--porcelain"], cwd=root):
        case Ok(stdout):
            dirty = bool(stdout.strip())
        case Err(error):
            console.error(str(error))
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_streaming"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that exited non-zero or never started.

    ``launched`` is False when the executable could not be run at all;
    ``returncode`` is then -1 and ``stderr`` holds the OS error. A negative
    ``returncode`` on a launched process is a terminating signal, as reported
    by ``subprocess``. Streamed commands leave both outputs empty.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    launched: bool = True

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        if not self.launched:
            return f"{shown} could not be started"
        if self.signal is not None:
            return f"{shown} killed by signal {self.signal}"
        return f"{shown} failed (exit {self.returncode})"

    @property
    def signal(self) -> int | None:
        if self.launched and self.returncode < 0:
            return -self.returncode
        return None

    @property
    def exit_status(self) -> int:
        """Shell-style status: 128 + N for a process killed by signal N."""
        if self.signal is not None:
            return 128 + self.signal
        return self.returncode


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its stdout."""
    return _execute(cmd, cwd, env, capture=True)


def run_streaming(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Run ``cmd`` in ``cwd`` with its output going to the terminal."""
    result = _execute(cmd, cwd, env, capture=False)
    if isinstance(result, Err):
        return result
    return Ok(None)


def _execute(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None,
    *,
    capture: bool,
) -> Result[str, ProcessError]:
    command = tuple(cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=capture,
            text=True,
            check=False,
        )
    except OSError as e:
        return Err(
            ProcessError(command=command, returncode=-1, stdout="", stderr=str(e), launched=False)
        )

    stdout = proc.stdout or ""
    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=command,
                returncode=proc.returncode,
                stdout=stdout,
                stderr=proc.stderr or "",
            )
        )
    return Ok(stdout)
