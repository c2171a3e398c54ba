"""Process and filesystem primitives."""

from .files import atomic_write_text, read_text_exact
from .process import ProcessError, run, run_streaming

__all__ = [
    "ProcessError",
    "atomic_write_text",
    "read_text_exact",
    "run",
    "run_streaming",
]
