"""Per-key locking used to serialize work on the same destination."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Hashable, Iterator


@dataclass(slots=True)
class _LockEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class KeyedLocks:
    """Hand out one mutex per key, dropping entries nobody is waiting on."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[Hashable, _LockEntry] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Block until the lock for ``key`` is free and hold it for the block."""
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _LockEntry()
            entry.holders += 1
        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


__all__ = ["KeyedLocks"]
