"""Thread-safe organizer counters."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from tidytree.organization.models import OutcomeKind, RelocationOutcome

from .models import OrganizerStats, OrganizerStatus

LOGGER = logging.getLogger(__name__)

StatsCallback = Callable[[OrganizerStats], None]


class StatsAggregator:
    """Owns the mutable ``OrganizerStats`` and serializes every update."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stats = OrganizerStats()
        self._subscribers: list[StatsCallback] = []

    def apply(self, outcome: RelocationOutcome) -> OrganizerStats:
        """Fold one relocation outcome into the counters."""
        with self._lock:
            if outcome.relocated:
                self._stats.files_moved += 1
                self._stats.total_size_bytes += outcome.size_bytes
            elif outcome.kind is OutcomeKind.DUPLICATE_DISCARDED:
                self._stats.duplicates_removed += 1
            elif outcome.kind is OutcomeKind.FAILED:
                self._stats.files_failed += 1
            else:
                self._stats.files_skipped += 1
            snapshot = self._stats.model_copy()
        self._notify(snapshot)
        return snapshot

    def folder_cleaned(self) -> OrganizerStats:
        with self._lock:
            self._stats.folders_cleaned += 1
            snapshot = self._stats.model_copy()
        self._notify(snapshot)
        return snapshot

    def set_status(self, status: OrganizerStatus) -> OrganizerStats:
        with self._lock:
            self._stats.status = status
            snapshot = self._stats.model_copy()
        self._notify(snapshot)
        return snapshot

    @property
    def status(self) -> OrganizerStatus:
        with self._lock:
            return self._stats.status

    def snapshot(self) -> OrganizerStats:
        """Return a copy of the current counters."""
        with self._lock:
            return self._stats.model_copy()

    def subscribe(self, callback: StatsCallback) -> Callable[[], None]:
        """Register ``callback`` for snapshots after each change."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def _notify(self, snapshot: OrganizerStats) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception:  # pragma: no cover - defensive logging
                LOGGER.exception("Stats subscriber %r failed", callback)


__all__ = ["StatsAggregator", "StatsCallback"]
