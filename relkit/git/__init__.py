"""Git operations."""

from .repository import GitError, Repository, StatusEntry

__all__ = ["GitError", "Repository", "StatusEntry"]
