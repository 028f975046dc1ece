"""Filesystem abstraction and implementations."""

from .base import DirEntry, EntryKind, FileSystem
from .local import LocalFileSystem
from .memory import InMemoryFileSystem

__all__ = ["DirEntry", "EntryKind", "FileSystem", "InMemoryFileSystem", "LocalFileSystem"]
