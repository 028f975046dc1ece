"""Translate relocation outcomes into stats updates and log entries."""

from __future__ import annotations

from pathlib import Path

from tidytree.organization.models import OutcomeKind, RelocationOutcome, SkipReason

from .events import EventLog
from .stats import StatsAggregator

_SKIP_MESSAGES = {
    SkipReason.MISSING: "file disappeared before it could be processed",
    SkipReason.NOT_A_FILE: "not a regular file",
    SkipReason.UNMAPPED_EXTENSION: "no category for this extension",
    SkipReason.NAME_CONFLICT: "a different file with this name already exists",
}


class OutcomeRecorder:
    """Shared sink used by both the tree scan and the watcher."""

    def __init__(self, events: EventLog, stats: StatsAggregator) -> None:
        self.events = events
        self.stats = stats

    def record(self, outcome: RelocationOutcome) -> None:
        """Update counters and emit the log entry for ``outcome``.

        Excluded paths only count as skipped; they are never logged as processed.
        """
        self.stats.apply(outcome)
        name = outcome.source.name
        category = outcome.category.value if outcome.category else "?"

        if outcome.kind is OutcomeKind.MOVED:
            self.events.success(f"Moved {name} -> {category}/")
        elif outcome.kind is OutcomeKind.RENAMED_AND_MOVED:
            final_name = outcome.destination.name if outcome.destination else name
            self.events.success(
                f"Moved {name} -> {category}/{final_name} "
                "(renamed, same name with different content)"
            )
        elif outcome.kind is OutcomeKind.DUPLICATE_DISCARDED:
            self.events.info(f"Duplicate found. Deleted source: {outcome.source}")
        elif outcome.kind is OutcomeKind.FAILED:
            self.events.error(f"Failed to organize {outcome.source}: {outcome.error}")
        elif outcome.reason is not SkipReason.EXCLUDED:
            detail = _SKIP_MESSAGES.get(outcome.reason, "skipped") if outcome.reason else "skipped"
            self.events.info(f"Skipped {outcome.source}: {detail}")

    def folder_removed(self, path: Path) -> None:
        self.stats.folder_cleaned()
        self.events.success(f"Deleted empty directory: {path}")

    def folder_failed(self, path: Path, error: BaseException) -> None:
        self.events.error(f"Failed to delete {path}: {error}")


__all__ = ["OutcomeRecorder"]
