"""Local disk implementation of the filesystem interface."""

from __future__ import annotations

import errno
import filecmp
import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Iterator

from .base import DirEntry, EntryKind, FileSystem

LOGGER = logging.getLogger(__name__)

_PARTIAL_SUFFIX = ".tidytree-partial"


class LocalFileSystem(FileSystem):
    """Filesystem backed by ``os``, ``shutil``, and ``pathlib``."""

    def resolve(self, path: Path | str) -> Path:
        return Path(path).expanduser().resolve()

    def list_dir(self, path: Path) -> list[DirEntry]:
        entries: list[DirEntry] = []
        with os.scandir(path) as iterator:
            for entry in iterator:
                kind: EntryKind
                if entry.is_dir(follow_symlinks=False):
                    kind = "dir"
                elif entry.is_file(follow_symlinks=False):
                    kind = "file"
                else:
                    kind = "other"
                entries.append(DirEntry(path=Path(entry.path), kind=kind))
        return entries

    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def is_file(self, path: Path) -> bool:
        try:
            mode = os.lstat(path).st_mode
        except OSError:
            return False
        return stat.S_ISREG(mode)

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def make_dirs(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def move(self, source: Path, destination: Path) -> None:
        if os.path.lexists(destination):
            raise FileExistsError(errno.EEXIST, "Destination already exists", str(destination))
        try:
            os.rename(source, destination)
        except OSError as exc:
            if exc.errno != errno.EXDEV:
                raise
            LOGGER.debug("Cross-device move for %s; copying instead.", source)
            self._copy_across_volumes(source, destination)

    def delete(self, path: Path) -> None:
        path.unlink()

    def remove_dir(self, path: Path) -> None:
        path.rmdir()

    def read_chunks(self, path: Path, chunk_size: int) -> Iterator[bytes]:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(chunk_size), b""):
                yield chunk

    def stat_size(self, path: Path) -> int:
        return path.stat().st_size

    def _copy_across_volumes(self, source: Path, destination: Path) -> None:
        """Copy, verify byte-for-byte, then delete the source.

        The copy lands on a temporary sibling first so a partially written
        destination is never visible under its final name.
        """
        partial = destination.with_name(f".{destination.name}{_PARTIAL_SUFFIX}")
        try:
            shutil.copy2(source, partial)
            if not filecmp.cmp(source, partial, shallow=False):
                raise OSError(errno.EIO, "Copied file does not match its source", str(source))
            os.rename(partial, destination)
        except OSError:
            partial.unlink(missing_ok=True)
            raise
        source.unlink()


__all__ = ["LocalFileSystem"]
