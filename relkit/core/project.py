"""Project layout resolution.

Resolves which project file is released and which test project (if any)
gates the release, either from ``release.toml`` or by looking at the usual
places in the repository.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import ReleaseConfig
from .result import Err, Ok, Result

__all__ = [
    "PROJECT_SUFFIXES",
    "ProjectLayout",
    "ProjectNotFound",
    "discover_project",
    "discover_test_project",
    "resolve_layout",
]

PROJECT_SUFFIXES = (".csproj", ".fsproj", ".vbproj")


@dataclass(frozen=True, slots=True)
class ProjectNotFound:
    """No releasable project file could be located."""

    root: Path
    configured: Path | None = None

    @property
    def message(self) -> str:
        if self.configured is None:
            return f"no project file found under {self.root}"
        if self.configured.suffix not in PROJECT_SUFFIXES:
            return f"not a packable project file: {self.configured}"
        return f"project file not found: {self.configured}"

    @property
    def hint(self) -> str:
        if self.configured is not None and self.configured.suffix not in PROJECT_SUFFIXES:
            return "Point [project] path at a .csproj, .fsproj or .vbproj"
        return "Set [project] path in release.toml"


@dataclass(frozen=True, slots=True)
class ProjectLayout:
    """Resolved paths for one release run.

    Attributes:
        root: Repository root (git working tree).
        project: Project file whose version is bumped and which is packed.
        test_project: Test project, or None when the repository has none.
        output_dir: Directory receiving packed artifacts.
    """

    root: Path
    project: Path
    test_project: Path | None
    output_dir: Path


def _is_project_file(path: Path) -> bool:
    return path.is_file() and path.suffix in PROJECT_SUFFIXES


def _is_test_project(path: Path) -> bool:
    stem = path.stem
    return stem.endswith("Tests") or stem.endswith(".Test") or stem.endswith(".Tests")


def _candidates(root: Path, patterns: tuple[str, ...]) -> list[Path]:
    found: list[Path] = []
    for pattern in patterns:
        found.extend(p for p in sorted(root.glob(pattern)) if _is_project_file(p))
    return found


def discover_project(root: Path) -> Path | None:
    """First non-test project file in the root, then in ``src/*/``."""
    for path in _candidates(root, ("*.*proj", "src/*/*.*proj")):
        if not _is_test_project(path):
            return path
    return None


def discover_test_project(root: Path) -> Path | None:
    """First test project in the root, ``tests/*/`` or ``test/*/``."""
    for path in _candidates(root, ("*.*proj", "tests/*/*.*proj", "test/*/*.*proj")):
        if _is_test_project(path):
            return path
    return None


def resolve_layout(root: Path, config: ReleaseConfig) -> Result[ProjectLayout, ProjectNotFound]:
    """Resolve the project layout for ``root``.

    A configured project path must exist. A configured test path that does
    not exist is kept as-is; the pipeline skips the test step in that case.
    """
    if config.project.path is not None:
        project = root / config.project.path
        if not _is_project_file(project):
            return Err(ProjectNotFound(root=root, configured=project))
    else:
        discovered = discover_project(root)
        if discovered is None:
            return Err(ProjectNotFound(root=root))
        project = discovered

    if config.project.test_path is not None:
        test_project: Path | None = root / config.project.test_path
    else:
        test_project = discover_test_project(root)

    return Ok(
        ProjectLayout(
            root=root,
            project=project,
            test_project=test_project,
            output_dir=root / config.build.output_dir,
        )
    )
