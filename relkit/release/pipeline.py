"""Release pipeline.

Runs the release steps in order and stops at the first failure:

1. working tree must be clean
2. restore, test (when a test project exists), build
3. bump the version in the project file
4. commit, plus an annotated tag on the production channel
5. push the branch (and the tag)
6. pack and publish

Nothing is rolled back: if pushing fails, the local commit stays; if no
package turns up, the pushed commit and tag stay.
"""

from __future__ import annotations

from pathlib import Path
from typing import TypeVar

from relkit.core.project import ProjectLayout
from relkit.core.result import Err, Ok, Result
from relkit.descriptor.store import (
    ProjectDescriptor,
    load_descriptor,
    read_version,
    save_descriptor,
    write_version,
)
from relkit.output.console import ConsoleProtocol, Style
from relkit.version.semver import resolve_version
from relkit.version.transition import ReleaseChannel, next_version

from .contracts import (
    BuildTool,
    ReleaseOutcome,
    ReleasePlan,
    ReleaseSettings,
    ToolFailure,
    VersionControl,
)
from .errors import ArtifactMissing, DescriptorFailed, DirtyWorkingTree, ReleaseError, ToolFailed

__all__ = ["ReleasePipeline"]

T = TypeVar("T")


class ReleasePipeline:
    """Sequences one release of one project.

    Collaborators are injected so the pipeline can run against fakes.
    """

    def __init__(
        self,
        *,
        vcs: VersionControl,
        build: BuildTool,
        console: ConsoleProtocol,
        settings: ReleaseSettings,
    ) -> None:
        self._vcs = vcs
        self._build = build
        self._console = console
        self._settings = settings

    @property
    def _layout(self) -> ProjectLayout:
        return self._settings.layout

    def run(self, channel: ReleaseChannel) -> Result[ReleaseOutcome, ReleaseError]:
        """Run the full release for ``channel``."""
        layout = self._layout
        configuration = self._settings.configuration

        clean = self._ensure_clean()
        if isinstance(clean, Err):
            return clean

        branch = self._target_branch()
        if isinstance(branch, Err):
            return branch

        self._console.header(f"Restoring {layout.project.name}")
        step = self._tool("restore", self._build.restore(layout.project))
        if isinstance(step, Err):
            return step

        if layout.test_project is not None and layout.test_project.is_file():
            self._console.header(f"Testing {layout.test_project.name}")
            step = self._tool("test", self._build.test(layout.test_project))
            if isinstance(step, Err):
                return step
        else:
            self._console.info("no test project, skipping tests")

        self._console.header(f"Building {layout.project.name} ({configuration})")
        step = self._tool("build", self._build.build(layout.project, configuration))
        if isinstance(step, Err):
            return step

        self._console.header("Updating version")
        loaded = self._load()
        if isinstance(loaded, Err):
            return loaded
        descriptor = loaded.value
        plan = self._plan_from(channel, descriptor)
        saved = save_descriptor(write_version(descriptor, str(plan.next)))
        if isinstance(saved, Err):
            return Err(DescriptorFailed(saved.error))
        self._console.success(f"{plan.current} -> {plan.next}")

        committed = self._commit(plan)
        if isinstance(committed, Err):
            return committed

        pushed = self._push(plan, branch.value)
        if isinstance(pushed, Err):
            return pushed

        self._console.header("Packing")
        packed = self._tool(
            "pack",
            self._build.pack(layout.project, configuration, layout.output_dir, str(plan.next)),
        )
        if isinstance(packed, Err):
            return packed
        artifact = packed.value
        if artifact is None:
            return Err(ArtifactMissing(output_dir=layout.output_dir, version=str(plan.next)))
        self._console.success(str(artifact))

        self._console.header(f"Publishing {artifact.name}")
        self._console.print(self._settings.registry_url, Style.DIM)
        published = self._tool(
            "publish", self._build.publish(artifact, self._settings.registry_url)
        )
        if isinstance(published, Err):
            return published

        self._console.success(f"released {plan.next}")
        return Ok(ReleaseOutcome(plan=plan, branch=branch.value, artifact=artifact))

    def plan(self, channel: ReleaseChannel) -> Result[ReleasePlan, ReleaseError]:
        """Compute the next version without building or writing anything."""
        clean = self._ensure_clean()
        if isinstance(clean, Err):
            return clean

        loaded = self._load()
        if isinstance(loaded, Err):
            return loaded
        return Ok(self._plan_from(channel, loaded.value))

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _ensure_clean(self) -> Result[None, ReleaseError]:
        self._console.header("Checking working tree")
        dirty = self._tool("status", self._vcs.has_uncommitted_changes())
        if isinstance(dirty, Err):
            return dirty
        if dirty.value:
            return Err(DirtyWorkingTree())
        self._console.success("working tree clean")
        return Ok(None)

    def _load(self) -> Result[ProjectDescriptor, ReleaseError]:
        loaded = load_descriptor(self._layout.project)
        if isinstance(loaded, Err):
            return Err(DescriptorFailed(loaded.error))
        return Ok(loaded.value)

    def _plan_from(self, channel: ReleaseChannel, descriptor: ProjectDescriptor) -> ReleasePlan:
        resolved = resolve_version(read_version(descriptor))
        if resolved.defaulted:
            found = "no version" if not resolved.raw else f"unparseable version {resolved.raw!r}"
            self._console.warning(
                f"{descriptor.path.name} has {found}; starting from {resolved.version}"
            )
        return ReleasePlan(
            channel=channel,
            descriptor=descriptor.path,
            current=resolved.version,
            next=next_version(resolved.version, channel),
            defaulted=resolved.defaulted,
        )

    def _target_branch(self) -> Result[str, ReleaseError]:
        if self._settings.branch is not None:
            return Ok(self._settings.branch)
        return self._tool("branch", self._vcs.current_branch())

    def _commit(self, plan: ReleasePlan) -> Result[None, ReleaseError]:
        self._console.header("Committing")
        staged = _relative(plan.descriptor, self._layout.root)
        step = self._tool("stage", self._vcs.stage_file(staged))
        if isinstance(step, Err):
            return step
        step = self._tool("commit", self._vcs.commit(plan.commit_message))
        if isinstance(step, Err):
            return step
        self._console.success(plan.commit_message)

        if plan.tag is not None:
            step = self._tool("tag", self._vcs.tag(plan.tag))
            if isinstance(step, Err):
                return step
            self._console.success(f"tagged {plan.tag}")
        return Ok(None)

    def _push(self, plan: ReleasePlan, branch: str) -> Result[None, ReleaseError]:
        self._console.header(f"Pushing {branch}")
        step = self._tool("push", self._vcs.push(branch))
        if isinstance(step, Err):
            return step
        if plan.tag is not None:
            step = self._tool("push tag", self._vcs.push_tag(plan.tag))
            if isinstance(step, Err):
                return step
        self._console.success("pushed")
        return Ok(None)

    def _tool(self, step: str, result: Result[T, ToolFailure]) -> Result[T, ReleaseError]:
        if isinstance(result, Err):
            error = result.error
            return Err(ToolFailed(step=step, message=error.message, returncode=error.returncode))
        return result


def _relative(path: Path, root: Path) -> Path:
    try:
        return path.relative_to(root)
    except ValueError:
        return path
