"""Release orchestration.

- contracts: collaborator protocols and run settings
- errors: ways a run can stop
- pipeline: the step sequence
"""

from __future__ import annotations

from .contracts import (
    BuildTool,
    ReleaseOutcome,
    ReleasePlan,
    ReleaseSettings,
    VersionControl,
)
from .errors import ReleaseError
from .pipeline import ReleasePipeline

__all__ = [
    "BuildTool",
    "ReleaseError",
    "ReleaseOutcome",
    "ReleasePipeline",
    "ReleasePlan",
    "ReleaseSettings",
    "VersionControl",
]
