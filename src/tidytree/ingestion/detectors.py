"""Content hashing for duplicate detection."""

from __future__ import annotations

import hashlib
from pathlib import Path

from tidytree.errors import FilesystemError
from tidytree.filesystem import FileSystem

DEFAULT_CHUNK_SIZE = 64 * 1024


class HashService:
    """Compute streamed content digests through the filesystem abstraction."""

    def __init__(
        self,
        filesystem: FileSystem,
        *,
        algorithm: str = "sha256",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive.")
        hashlib.new(algorithm)
        self._filesystem = filesystem
        self._algorithm = algorithm
        self._chunk_size = chunk_size

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def digest(self, path: Path) -> str:
        """Return the hex digest of ``path``.

        Raises:
            FilesystemError: If the file cannot be read to the end.
        """
        hasher = hashlib.new(self._algorithm)
        try:
            for chunk in self._filesystem.read_chunks(path, self._chunk_size):
                hasher.update(chunk)
        except OSError as exc:
            raise FilesystemError(f"Unable to hash {path}: {exc}", path) from exc
        return hasher.hexdigest()


__all__ = ["DEFAULT_CHUNK_SIZE", "HashService"]
