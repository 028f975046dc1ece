"""Bottom-up directory traversal and empty directory pruning."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from tidytree.filesystem import FileSystem
from tidytree.organization.models import OutcomeKind, RelocationOutcome
from tidytree.organization.relocator import FileRelocator
from tidytree.state import OutcomeRecorder

from .policy import PathPolicy

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanSummary:
    """Aggregated result of one tree scan.

    Attributes:
        root: Root directory that was scanned.
        outcomes: One outcome per file encountered.
        folders_removed: Directories deleted because they ended up empty.
        excluded_dirs: Subtrees pruned by the exclusion rules.
        errors: Directory-level failures (listing or removal).
        started_at: When the scan began.
        finished_at: When the scan completed.
    """

    root: Path
    outcomes: list[RelocationOutcome] = field(default_factory=list)
    folders_removed: list[Path] = field(default_factory=list)
    excluded_dirs: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    def count(self, kind: OutcomeKind) -> int:
        return sum(1 for outcome in self.outcomes if outcome.kind is kind)

    @property
    def files_moved(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.relocated)

    @property
    def duplicates_removed(self) -> int:
        return self.count(OutcomeKind.DUPLICATE_DISCARDED)

    @property
    def folders_cleaned(self) -> int:
        return len(self.folders_removed)

    @property
    def bytes_moved(self) -> int:
        return sum(outcome.size_bytes for outcome in self.outcomes if outcome.relocated)

    def counts(self) -> dict[str, int]:
        """Return summary metrics in display order."""
        return {
            "files": len(self.outcomes),
            "moved": self.files_moved,
            "renamed": self.count(OutcomeKind.RENAMED_AND_MOVED),
            "duplicates": self.duplicates_removed,
            "skipped": self.count(OutcomeKind.SKIPPED),
            "failed": self.count(OutcomeKind.FAILED),
            "folders_cleaned": self.folders_cleaned,
            "bytes_moved": self.bytes_moved,
            "errors": len(self.errors),
        }

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready payload."""
        return {
            "root": self.root.as_posix(),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "counts": self.counts(),
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
            "folders_removed": [path.as_posix() for path in self.folders_removed],
            "excluded_dirs": [path.as_posix() for path in self.excluded_dirs],
            "errors": list(self.errors),
        }


class TreeScanner:
    """Walk a tree depth-first, children before parents.

    Each directory's files and subdirectories are fully handled before the
    directory itself is checked for emptiness, so a folder emptied by the
    relocation of its contents is removed in the same pass. The scan root is
    never removed and excluded subtrees are never entered.
    """

    def __init__(
        self,
        filesystem: FileSystem,
        policy: PathPolicy,
        relocator: FileRelocator,
        recorder: OutcomeRecorder,
        *,
        prune_empty_dirs: bool = True,
    ) -> None:
        self._filesystem = filesystem
        self._policy = policy
        self._relocator = relocator
        self._recorder = recorder
        self._prune_empty_dirs = prune_empty_dirs

    def scan(self, root: Path | None = None) -> ScanSummary:
        """Organize every file below ``root`` and prune emptied directories.

        Args:
            root: Directory to scan; defaults to the policy's scan root.

        Returns:
            ScanSummary: Outcomes and directory changes from this pass.
        """
        root = self._policy.root if root is None else self._filesystem.resolve(root)
        summary = ScanSummary(root=root)
        events = self._recorder.events

        events.process(f"Initializing deep scan of {root}...")
        excluded = ", ".join(sorted(self._policy.exclusions))
        events.warning(f"Excluded directories: {excluded}")
        events.info("Traversing directory tree (bottom-up approach)...")

        stack: list[tuple[Path, bool]] = [(root, False)]
        while stack:
            directory, expanded = stack.pop()
            if expanded:
                self._finish_directory(directory, root, summary)
                continue

            try:
                entries = self._filesystem.list_dir(directory)
            except OSError as exc:
                message = f"Failed to list {directory}: {exc}"
                summary.errors.append(message)
                events.error(message)
                continue

            for entry in entries:
                if entry.kind != "file":
                    continue
                outcome = self._relocator.process(entry.path)
                self._recorder.record(outcome)
                summary.outcomes.append(outcome)

            stack.append((directory, True))
            for entry in entries:
                if entry.kind != "dir":
                    continue
                if self._policy.is_excluded(entry.path):
                    LOGGER.debug("Pruning excluded subtree %s", entry.path)
                    summary.excluded_dirs.append(entry.path)
                    continue
                stack.append((entry.path, False))

        summary.finished_at = datetime.now(timezone.utc)
        counts = summary.counts()
        events.info(
            f"Scan complete: {counts['moved']} moved, {counts['duplicates']} duplicates removed, "
            f"{counts['folders_cleaned']} empty directories deleted, {counts['failed']} failed."
        )
        return summary

    def _finish_directory(self, directory: Path, root: Path, summary: ScanSummary) -> None:
        if directory == root or not self._prune_empty_dirs:
            return
        try:
            if self._filesystem.list_dir(directory):
                return
            self._filesystem.remove_dir(directory)
        except OSError as exc:
            summary.errors.append(f"Failed to delete {directory}: {exc}")
            self._recorder.folder_failed(directory, exc)
            return
        summary.folders_removed.append(directory)
        self._recorder.folder_removed(directory)


__all__ = ["ScanSummary", "TreeScanner"]
