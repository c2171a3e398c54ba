"""Error types for a release run.

Each variant corresponds to one way a run can stop. None of them undo the
steps that already completed.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relkit.descriptor.store import DescriptorError
from relkit.version.transition import InvalidChannel

__all__ = [
    "ArtifactMissing",
    "DescriptorFailed",
    "DirtyWorkingTree",
    "InvalidChannel",
    "ReleaseError",
    "ToolFailed",
]


@dataclass(frozen=True, slots=True)
class DirtyWorkingTree:
    """Uncommitted or untracked changes were found before the run started."""


@dataclass(frozen=True, slots=True)
class ToolFailed:
    """An external tool step exited non-zero (or could not start).

    Attributes:
        step: Pipeline step name (e.g. "restore", "push").
        message: Error detail from the tool.
        returncode: The tool's exit status, -1 if it never started.
    """

    step: str
    message: str
    returncode: int


@dataclass(frozen=True, slots=True)
class DescriptorFailed:
    error: DescriptorError


@dataclass(frozen=True, slots=True)
class ArtifactMissing:
    output_dir: Path
    version: str


ReleaseError = DirtyWorkingTree | InvalidChannel | ToolFailed | DescriptorFailed | ArtifactMissing
