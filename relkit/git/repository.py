"""Git repository abstraction.

``Repository`` is the ``VersionControl`` used by the release pipeline. All
operations shell out to ``git -C <root>`` and return Result types.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.has_uncommitted_changes():
        case Ok(True):
            print("commit or stash your changes first")
        case Ok(False):
            pass
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.platform.process import ProcessError
from relkit.platform.process import run as run_process

__all__ = [
    "GitError",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "push origin main")
        message: Error message
        returncode: Process return code (-1 if git could not be started)
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single ``git status --porcelain`` line.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str


class Repository:
    """Git working tree at ``path``.

    Attributes:
        path: Path to the repository root
        remote: Remote used by push operations
    """

    def __init__(self, path: Path, *, remote: str = "origin") -> None:
        self.path = path
        self.remote = remote

    def status_entries(self) -> Result[tuple[StatusEntry, ...], GitError]:
        """Changed, staged and untracked files."""
        result = self._run(["status", "--porcelain=v1"])
        match result:
            case Err(e):
                return Err(self._error("status", e, "git status failed"))
            case Ok(stdout):
                entries = (self._parse_entry(line) for line in stdout.splitlines())
                return Ok(tuple(e for e in entries if e is not None))

    def has_uncommitted_changes(self) -> Result[bool, GitError]:
        """True if the working tree has staged, unstaged or untracked changes."""
        return self.status_entries().map(lambda entries: len(entries) > 0)

    def current_branch(self) -> Result[str, GitError]:
        """Current branch name; detached HEAD is an error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse", e, "cannot determine current branch"))
            case Ok(stdout):
                branch = stdout.strip()
                if not branch or branch == "HEAD":
                    return Err(
                        GitError(command="rev-parse", message="HEAD is detached (no branch to push)")
                    )
                return Ok(branch)

    def stage_file(self, path: Path) -> Result[None, GitError]:
        return self._mutate(["add", "--", str(path)], "add failed")

    def commit(self, message: str) -> Result[None, GitError]:
        return self._mutate(["commit", "-m", message], "commit failed")

    def tag(self, name: str) -> Result[None, GitError]:
        """Create an annotated tag on HEAD."""
        return self._mutate(["tag", "-a", name, "-m", f"Release {name}"], "tag failed")

    def push(self, branch: str) -> Result[None, GitError]:
        return self._mutate(["push", self.remote, branch], "push failed")

    def push_tag(self, name: str) -> Result[None, GitError]:
        return self._mutate(["push", self.remote, f"refs/tags/{name}"], "tag push failed")

    def _mutate(self, args: list[str], fallback: str) -> Result[None, GitError]:
        result = self._run(args)
        match result:
            case Err(e):
                return Err(self._error(" ".join(args[:3]), e, fallback))
            case Ok(_):
                return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path)

    def _error(self, command: str, e: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or e.stdout.strip() or fallback,
            returncode=e.exit_status,
        )

    def _parse_entry(self, line: str) -> StatusEntry | None:
        """Parse a single status entry line."""
        if len(line) < 4:
            return None

        if line.startswith("?? "):
            return StatusEntry(xy="??", path=line[3:])

        return StatusEntry(xy=line[:2], path=line[3:])
