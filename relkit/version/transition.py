"""Release channels and the version bump rules.

| channel     | current suffix         | next version                     |
|-------------|------------------------|----------------------------------|
| development | dev.N                  | same core, dev.(N+1)             |
| development | none or other          | patch + 1, dev.1                 |
| production  | starts with "dev"      | same core, suffix dropped        |
| production  | none or other          | patch + 1, no suffix             |
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from relkit.core.result import Err, Ok, Result

from .semver import DEV_LABEL, SemanticVersion

__all__ = [
    "InvalidChannel",
    "ReleaseChannel",
    "next_version",
    "parse_channel",
]


class ReleaseChannel(StrEnum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @property
    def tags_release(self) -> bool:
        """Production releases get an annotated ``v{version}`` tag."""
        return self is ReleaseChannel.PRODUCTION


@dataclass(frozen=True, slots=True)
class InvalidChannel:
    value: str

    @property
    def message(self) -> str:
        return f"invalid build type: {self.value!r}"

    @property
    def hint(self) -> str:
        allowed = ", ".join(c.value for c in ReleaseChannel)
        return f"Expected one of: {allowed}"


def parse_channel(raw: str) -> Result[ReleaseChannel, InvalidChannel]:
    value = raw.strip()
    for channel in ReleaseChannel:
        if channel.value == value:
            return Ok(channel)
    return Err(InvalidChannel(value=raw))


def next_version(current: SemanticVersion, channel: ReleaseChannel) -> SemanticVersion:
    """Compute the version that follows ``current`` on ``channel``."""
    match channel:
        case ReleaseChannel.DEVELOPMENT:
            if current.prerelease == DEV_LABEL and current.counter is not None:
                return SemanticVersion(
                    current.major,
                    current.minor,
                    current.patch,
                    DEV_LABEL,
                    current.counter + 1,
                )
            return SemanticVersion(current.major, current.minor, current.patch + 1, DEV_LABEL, 1)
        case ReleaseChannel.PRODUCTION:
            if current.is_dev:
                return SemanticVersion(current.major, current.minor, current.patch)
            return SemanticVersion(current.major, current.minor, current.patch + 1)
        case _:
            raise AssertionError(f"unexpected release channel: {channel}")
