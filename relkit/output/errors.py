"""Error presentation utilities.

Centralized error formatting and exit code mapping for release runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relkit.core.errors import ErrorCode
from relkit.output.console import Style
from relkit.release.errors import (
    ArtifactMissing,
    DescriptorFailed,
    DirtyWorkingTree,
    InvalidChannel,
    ReleaseError,
    ToolFailed,
)

if TYPE_CHECKING:
    from relkit.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print release error to console with appropriate formatting."""
    match error:
        case DirtyWorkingTree():
            console.error("working tree has uncommitted changes")
            console.print("hint: commit or stash them before releasing", Style.DIM)
        case InvalidChannel():
            console.error(error.message)
            console.print(f"hint: {error.hint}", Style.DIM)
        case ToolFailed(step=step, message=message):
            console.error(f"{step}: {message}")
        case DescriptorFailed(error=inner):
            console.error(inner.message)
            console.print(f"hint: {inner.hint}", Style.DIM)
        case ArtifactMissing(output_dir=output_dir, version=version):
            console.error(f"no package for {version} found in {output_dir}")


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error.

    Tool failures exit with the tool's own status.
    """
    match error:
        case DirtyWorkingTree() | InvalidChannel() | ArtifactMissing():
            return int(ErrorCode.USER_ERROR)
        case ToolFailed(returncode=rc):
            return rc if rc > 0 else int(ErrorCode.BUILD_ERROR)
        case DescriptorFailed():
            return int(ErrorCode.IO_ERROR)
