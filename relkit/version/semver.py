"""Semantic version parsing and rendering.

Versions look like ``MAJOR.MINOR.PATCH`` with an optional ``-SUFFIX``. The
suffix ``dev.N`` is understood structurally (label ``dev``, counter ``N``);
any other suffix is kept as an opaque label.

A project file with a missing or unreadable version does not stop a
release: ``resolve_version`` substitutes ``DEFAULT_VERSION`` and reports
that it did so through ``ResolvedVersion.defaulted``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from relkit.core.result import Err, Ok, Result

__all__ = [
    "DEFAULT_VERSION",
    "DEV_LABEL",
    "InvalidVersion",
    "ResolvedVersion",
    "SemanticVersion",
    "parse_version",
    "render_version",
    "resolve_version",
]

DEV_LABEL = "dev"

_VERSION_RE = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)(?:-(.+))?")
_DEV_RE = re.compile(r"dev\.([0-9]+)")


@dataclass(frozen=True, slots=True)
class SemanticVersion:
    """A parsed version.

    ``counter`` is only set for the structured ``dev.N`` suffix, in which
    case ``prerelease`` is ``"dev"``.
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    counter: int | None = None

    @property
    def is_dev(self) -> bool:
        """True if the suffix starts with ``dev`` (structured or not)."""
        return self.prerelease is not None and self.prerelease.startswith(DEV_LABEL)

    def __str__(self) -> str:
        return render_version(self)


DEFAULT_VERSION = SemanticVersion(10, 0, 0)


@dataclass(frozen=True, slots=True)
class InvalidVersion:
    raw: str | None

    @property
    def message(self) -> str:
        if not self.raw:
            return "no version found"
        return f"not a semantic version: {self.raw!r}"


@dataclass(frozen=True, slots=True)
class ResolvedVersion:
    """Outcome of ``resolve_version``.

    Attributes:
        version: The parsed version, or DEFAULT_VERSION.
        defaulted: True when the fallback was used.
        raw: The text that was parsed (None when nothing was found).
    """

    version: SemanticVersion
    defaulted: bool
    raw: str | None


def parse_version(raw: str | None) -> Result[SemanticVersion, InvalidVersion]:
    """Parse ``raw`` strictly; the whole string must match."""
    if raw is None:
        return Err(InvalidVersion(raw=None))

    m = _VERSION_RE.fullmatch(raw)
    if m is None:
        return Err(InvalidVersion(raw=raw))

    major, minor, patch = int(m.group(1)), int(m.group(2)), int(m.group(3))
    suffix = m.group(4)
    if suffix is None:
        return Ok(SemanticVersion(major, minor, patch))

    dev = _DEV_RE.fullmatch(suffix)
    if dev is not None:
        return Ok(SemanticVersion(major, minor, patch, DEV_LABEL, int(dev.group(1))))
    return Ok(SemanticVersion(major, minor, patch, suffix))


def resolve_version(raw: str | None) -> ResolvedVersion:
    """Parse ``raw``, falling back to DEFAULT_VERSION when it is not a version."""
    match parse_version(raw):
        case Ok(version):
            return ResolvedVersion(version=version, defaulted=False, raw=raw)
        case Err(_):
            return ResolvedVersion(version=DEFAULT_VERSION, defaulted=True, raw=raw)


def render_version(v: SemanticVersion) -> str:
    core = f"{v.major}.{v.minor}.{v.patch}"
    if v.prerelease is None:
        return core
    if v.counter is not None:
        return f"{core}-{v.prerelease}.{v.counter}"
    return f"{core}-{v.prerelease}"
