"""Filesystem capability interface used by the organizer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Literal

EntryKind = Literal["file", "dir", "other"]


@dataclass(frozen=True, slots=True)
class DirEntry:
    """Single directory listing entry.

    Attributes:
        path: Absolute path of the entry.
        kind: ``file`` for regular files, ``dir`` for real directories, ``other``
            for symlinks, sockets, and similar entries that are never traversed.
    """

    path: Path
    kind: EntryKind

    @property
    def name(self) -> str:
        return self.path.name


class FileSystem(ABC):
    """Operations the organizer needs from a filesystem.

    Implementations raise ``OSError`` subclasses for failures so callers can
    treat the local disk and test doubles the same way.
    """

    @abstractmethod
    def resolve(self, path: Path | str) -> Path:
        """Return an absolute, user-expanded form of ``path``."""

    @abstractmethod
    def list_dir(self, path: Path) -> list[DirEntry]:
        """List the direct children of ``path``."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Return whether anything exists at ``path``."""

    @abstractmethod
    def is_file(self, path: Path) -> bool:
        """Return whether ``path`` is a regular file (symlinks excluded)."""

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        """Return whether ``path`` is a directory."""

    @abstractmethod
    def make_dirs(self, path: Path) -> None:
        """Create ``path`` and its parents; no error when it already exists."""

    @abstractmethod
    def move(self, source: Path, destination: Path) -> None:
        """Move a file without ever overwriting ``destination``.

        Raises:
            FileExistsError: If ``destination`` already exists.
        """

    @abstractmethod
    def delete(self, path: Path) -> None:
        """Delete a single file."""

    @abstractmethod
    def remove_dir(self, path: Path) -> None:
        """Remove an empty directory."""

    @abstractmethod
    def read_chunks(self, path: Path, chunk_size: int) -> Iterator[bytes]:
        """Yield the file contents sequentially in ``chunk_size`` pieces."""

    @abstractmethod
    def stat_size(self, path: Path) -> int:
        """Return the file size in bytes."""


__all__ = ["DirEntry", "EntryKind", "FileSystem"]
