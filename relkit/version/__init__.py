"""Version model and bump rules."""

from .semver import (
    DEFAULT_VERSION,
    InvalidVersion,
    ResolvedVersion,
    SemanticVersion,
    parse_version,
    render_version,
    resolve_version,
)
from .transition import InvalidChannel, ReleaseChannel, next_version, parse_channel

__all__ = [
    "DEFAULT_VERSION",
    "InvalidChannel",
    "InvalidVersion",
    "ReleaseChannel",
    "ResolvedVersion",
    "SemanticVersion",
    "next_version",
    "parse_channel",
    "parse_version",
    "render_version",
    "resolve_version",
]
