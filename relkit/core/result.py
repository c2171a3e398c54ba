"""Result type for explicit error handling.

Every fallible step of a release (running git, running the build tool,
reading the project file) returns a Result instead of raising. The CLI is
the only place that turns an Err into a process exit code.

Usage:
    def read_text(path: Path) -> Result[str, str]:
        if not path.exists():
            return Err(f"missing: {path}")
        return Ok(path.read_text(encoding="utf-8"))

    match read_text(path):
        case Ok(text):
            ...
        case Err(message):
            console.error(message)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result carrying ``value``."""

    value: T

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Apply ``f`` to the carried value."""
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result carrying ``error``."""

    error: E

    def map(self, f: Callable[[T], U]) -> Err[E]:
        """Return self unchanged (no value to map)."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[E]
