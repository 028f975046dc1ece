"""Severity-tagged event stream with a bounded history."""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from typing import Callable

from .models import LogEntry, Severity

LOGGER = logging.getLogger(__name__)

_LEVELS: dict[str, int] = {
    "info": logging.INFO,
    "success": logging.INFO,
    "process": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

EntryCallback = Callable[[LogEntry], None]


class EventLog:
    """Append-only log that keeps the last ``capacity`` entries.

    Every entry is also forwarded to the ``logging`` module and to any
    subscribers, which is how the CLI renders live output.
    """

    def __init__(self, capacity: int = 50) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive.")
        self._lock = threading.Lock()
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._ids = itertools.count(1)
        self._subscribers: list[EntryCallback] = []

    def emit(self, severity: Severity, message: str) -> LogEntry:
        """Record a new entry and notify subscribers."""
        with self._lock:
            entry = LogEntry(id=next(self._ids), severity=severity, message=message)
            self._entries.append(entry)
            subscribers = list(self._subscribers)
        LOGGER.log(_LEVELS[severity], "[%s] %s", severity, message)
        for callback in subscribers:
            try:
                callback(entry)
            except Exception:  # pragma: no cover - defensive logging
                LOGGER.exception("Event subscriber %r failed", callback)
        return entry

    def info(self, message: str) -> LogEntry:
        return self.emit("info", message)

    def success(self, message: str) -> LogEntry:
        return self.emit("success", message)

    def warning(self, message: str) -> LogEntry:
        return self.emit("warning", message)

    def error(self, message: str) -> LogEntry:
        return self.emit("error", message)

    def process(self, message: str) -> LogEntry:
        return self.emit("process", message)

    def entries(self) -> list[LogEntry]:
        """Return the retained entries, oldest first."""
        with self._lock:
            return list(self._entries)

    def subscribe(self, callback: EntryCallback) -> Callable[[], None]:
        """Register ``callback`` for new entries; returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe


__all__ = ["EntryCallback", "EventLog"]
