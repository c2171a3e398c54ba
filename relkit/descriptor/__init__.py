"""Project file (descriptor) version storage."""

from .store import (
    DescriptorError,
    ProjectDescriptor,
    load_descriptor,
    read_version,
    save_descriptor,
    write_version,
)

__all__ = [
    "DescriptorError",
    "ProjectDescriptor",
    "load_descriptor",
    "read_version",
    "save_descriptor",
    "write_version",
]
