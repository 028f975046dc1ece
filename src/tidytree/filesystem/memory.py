"""In-memory filesystem used for fast, deterministic organizer tests."""

from __future__ import annotations

import errno
import os
import threading
from pathlib import Path
from typing import Iterator

from .base import DirEntry, FileSystem

_ROOT = Path("/")


class InMemoryFileSystem(FileSystem):
    """Thread-safe dictionary-backed filesystem.

    Files map absolute paths to their bytes; directories are tracked
    explicitly so empty directories exist just like on disk. Failures can be
    injected per path and operation to exercise error handling.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._files: dict[Path, bytes] = {}
        self._dirs: set[Path] = {_ROOT}
        self._failures: dict[tuple[Path, str], OSError] = {}

    # Test helpers -----------------------------------------------------

    def add_file(self, path: Path | str, data: bytes | str = b"") -> Path:
        """Create a file (and missing parents) holding ``data``."""
        target = self.resolve(path)
        payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        with self._lock:
            self._make_dirs_locked(target.parent)
            self._files[target] = payload
        return target

    def add_dir(self, path: Path | str) -> Path:
        """Create a directory (and missing parents)."""
        target = self.resolve(path)
        self.make_dirs(target)
        return target

    def read_bytes(self, path: Path | str) -> bytes:
        target = self.resolve(path)
        with self._lock:
            try:
                return self._files[target]
            except KeyError:
                raise FileNotFoundError(errno.ENOENT, "No such file", str(target)) from None

    def files(self) -> list[Path]:
        """Return every file path, sorted."""
        with self._lock:
            return sorted(self._files)

    def inject_failure(self, path: Path | str, operation: str, error: OSError | None = None) -> None:
        """Make ``operation`` on ``path`` raise ``error`` (``PermissionError`` by default).

        Operations: ``list``, ``read``, ``stat``, ``move``, ``delete``, ``remove_dir``,
        ``make_dirs``.
        """
        target = self.resolve(path)
        failure = error or PermissionError(errno.EACCES, "Permission denied", str(target))
        with self._lock:
            self._failures[(target, operation)] = failure

    def clear_failures(self) -> None:
        with self._lock:
            self._failures.clear()

    # FileSystem -------------------------------------------------------

    def resolve(self, path: Path | str) -> Path:
        expanded = Path(os.path.expanduser(str(path)))
        if not expanded.is_absolute():
            expanded = _ROOT / expanded
        return Path(os.path.normpath(expanded))

    def list_dir(self, path: Path) -> list[DirEntry]:
        with self._lock:
            self._raise_if_failing(path, "list")
            if path not in self._dirs:
                if path in self._files:
                    raise NotADirectoryError(errno.ENOTDIR, "Not a directory", str(path))
                raise FileNotFoundError(errno.ENOENT, "No such directory", str(path))
            entries = [DirEntry(path=d, kind="dir") for d in self._dirs if d != path and d.parent == path]
            entries.extend(DirEntry(path=f, kind="file") for f in self._files if f.parent == path)
        return sorted(entries, key=lambda entry: entry.path)

    def exists(self, path: Path) -> bool:
        with self._lock:
            return path in self._files or path in self._dirs

    def is_file(self, path: Path) -> bool:
        with self._lock:
            return path in self._files

    def is_dir(self, path: Path) -> bool:
        with self._lock:
            return path in self._dirs

    def make_dirs(self, path: Path) -> None:
        with self._lock:
            self._raise_if_failing(path, "make_dirs")
            self._make_dirs_locked(path)

    def move(self, source: Path, destination: Path) -> None:
        with self._lock:
            self._raise_if_failing(source, "move")
            if source not in self._files:
                raise FileNotFoundError(errno.ENOENT, "No such file", str(source))
            if destination in self._files or destination in self._dirs:
                raise FileExistsError(errno.EEXIST, "Destination already exists", str(destination))
            if destination.parent not in self._dirs:
                raise FileNotFoundError(errno.ENOENT, "No such directory", str(destination.parent))
            self._files[destination] = self._files.pop(source)

    def delete(self, path: Path) -> None:
        with self._lock:
            self._raise_if_failing(path, "delete")
            if path not in self._files:
                raise FileNotFoundError(errno.ENOENT, "No such file", str(path))
            del self._files[path]

    def remove_dir(self, path: Path) -> None:
        with self._lock:
            self._raise_if_failing(path, "remove_dir")
            if path not in self._dirs:
                raise FileNotFoundError(errno.ENOENT, "No such directory", str(path))
            if any(f.parent == path for f in self._files) or any(
                d.parent == path and d != path for d in self._dirs
            ):
                raise OSError(errno.ENOTEMPTY, "Directory not empty", str(path))
            self._dirs.discard(path)

    def read_chunks(self, path: Path, chunk_size: int) -> Iterator[bytes]:
        with self._lock:
            self._raise_if_failing(path, "read")
            data = self._files.get(path)
        if data is None:
            raise FileNotFoundError(errno.ENOENT, "No such file", str(path))
        for offset in range(0, len(data), chunk_size):
            yield data[offset : offset + chunk_size]

    def stat_size(self, path: Path) -> int:
        with self._lock:
            self._raise_if_failing(path, "stat")
            if path in self._files:
                return len(self._files[path])
        raise FileNotFoundError(errno.ENOENT, "No such file", str(path))

    # Internal helpers -------------------------------------------------

    def _make_dirs_locked(self, path: Path) -> None:
        for candidate in (path, *path.parents):
            if candidate in self._files:
                raise FileExistsError(errno.EEXIST, "A file is in the way", str(candidate))
        self._dirs.add(path)
        self._dirs.update(path.parents)

    def _raise_if_failing(self, path: Path, operation: str) -> None:
        failure = self._failures.get((path, operation))
        if failure is not None:
            raise failure


__all__ = ["InMemoryFileSystem"]
