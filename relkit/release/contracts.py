"""Contracts between the release pipeline and the tools it drives.

The pipeline only talks to ``VersionControl`` and ``BuildTool``. The git
and dotnet adapters implement them; tests substitute in-memory fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from relkit.core.project import ProjectLayout
from relkit.core.result import Result
from relkit.version.semver import SemanticVersion
from relkit.version.transition import ReleaseChannel

__all__ = [
    "BuildTool",
    "ReleaseOutcome",
    "ReleasePlan",
    "ReleaseSettings",
    "ToolFailure",
    "VersionControl",
]


class ToolFailure(Protocol):
    """Shape shared by GitError and BuildToolError."""

    @property
    def message(self) -> str: ...

    @property
    def returncode(self) -> int: ...


class VersionControl(Protocol):
    def has_uncommitted_changes(self) -> Result[bool, ToolFailure]: ...

    def current_branch(self) -> Result[str, ToolFailure]: ...

    def stage_file(self, path: Path) -> Result[None, ToolFailure]: ...

    def commit(self, message: str) -> Result[None, ToolFailure]: ...

    def tag(self, name: str) -> Result[None, ToolFailure]: ...

    def push(self, branch: str) -> Result[None, ToolFailure]: ...

    def push_tag(self, name: str) -> Result[None, ToolFailure]: ...


class BuildTool(Protocol):
    def restore(self, project: Path) -> Result[None, ToolFailure]: ...

    def test(self, test_project: Path) -> Result[None, ToolFailure]: ...

    def build(self, project: Path, configuration: str) -> Result[None, ToolFailure]: ...

    def pack(
        self,
        project: Path,
        configuration: str,
        output_dir: Path,
        version: str,
    ) -> Result[Path | None, ToolFailure]:
        """Pack ``project``; Ok(None) means the tool ran but left no artifact."""
        ...

    def publish(self, artifact: Path, registry_url: str) -> Result[None, ToolFailure]: ...


@dataclass(frozen=True, slots=True)
class ReleaseSettings:
    """Everything a run needs besides the channel.

    ``branch`` None means "push the current branch".
    """

    layout: ProjectLayout
    configuration: str = "Release"
    registry_url: str = "https://api.nuget.org/v3/index.json"
    branch: str | None = None


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    channel: ReleaseChannel
    descriptor: Path
    current: SemanticVersion
    next: SemanticVersion
    defaulted: bool

    @property
    def tag(self) -> str | None:
        return f"v{self.next}" if self.channel.tags_release else None

    @property
    def commit_message(self) -> str:
        return f"Bump version to {self.next} [skip ci]"


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    plan: ReleasePlan
    branch: str
    artifact: Path
