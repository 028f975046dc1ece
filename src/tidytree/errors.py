"""Exception hierarchy shared by the organizer components."""

from __future__ import annotations

from pathlib import Path


class TidyTreeError(Exception):
    """Base exception for organizer failures."""


class FilesystemError(TidyTreeError):
    """Raised when a file cannot be read, moved, or deleted.

    Attributes:
        path: Path involved in the failed operation, when known.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class PolicyViolation(TidyTreeError):
    """Raised when an operation would write outside the destination tree."""


class WatchStartError(TidyTreeError):
    """Raised when the filesystem watcher cannot be started."""


__all__ = ["TidyTreeError", "FilesystemError", "PolicyViolation", "WatchStartError"]
