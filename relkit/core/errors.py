"""Exit codes for the release command.

A failing external tool (git, dotnet) propagates its own exit status; the
values below cover everything relkit decides on its own.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. These values are part of the CLI contract.

    - 0: Success
    - 1: User error (dirty tree, bad build type, no artifact, bad config)
    - 3: Build error (an external tool could not be started)
    - 5: I/O error (project file unreadable or not writable)
    """

    OK = 0
    USER_ERROR = 1
    BUILD_ERROR = 3
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
