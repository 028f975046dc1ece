"""Single-file relocation with hash based deduplication."""

from __future__ import annotations

import itertools
import logging
import time
from pathlib import Path
from typing import Literal

from tidytree.classification import Category, normalize_extension
from tidytree.errors import TidyTreeError
from tidytree.filesystem import FileSystem
from tidytree.ingestion.detectors import HashService
from tidytree.ingestion.policy import PathPolicy

from .locks import KeyedLocks
from .models import CandidateFile, RelocationOutcome, SkipReason

LOGGER = logging.getLogger(__name__)

ConflictStrategy = Literal["append_number", "timestamp", "skip"]


class FileRelocator:
    """Decide and perform the move, dedup, or rename for one file.

    Work that targets the same category directory is serialized so the
    duplicate check and the move into a free name happen atomically with
    respect to other workers. The same source path is never processed twice
    at once either; locks are always taken source first.
    """

    def __init__(
        self,
        filesystem: FileSystem,
        policy: PathPolicy,
        hasher: HashService,
        *,
        move_unknown: bool = True,
        conflict_resolution: ConflictStrategy = "append_number",
        locks: KeyedLocks | None = None,
    ) -> None:
        self._filesystem = filesystem
        self._policy = policy
        self._hasher = hasher
        self._move_unknown = move_unknown
        self._conflict_resolution = conflict_resolution
        self._locks = locks or KeyedLocks()
        self._sequence = itertools.count(1)

    @property
    def policy(self) -> PathPolicy:
        return self._policy

    def process(self, path: Path) -> RelocationOutcome:
        """Relocate ``path`` and report what happened.

        Never raises for I/O or policy failures; those become ``FAILED`` outcomes.

        Args:
            path: File to organize.

        Returns:
            RelocationOutcome: Exactly one outcome for the call.
        """
        source = self._filesystem.resolve(path.parent) / path.name
        if self._policy.is_excluded(source):
            LOGGER.debug("Ignoring excluded path %s", source)
            return RelocationOutcome.skipped(source, SkipReason.EXCLUDED)

        with self._locks.hold(("source", source)):
            return self._relocate(source)

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _relocate(self, source: Path) -> RelocationOutcome:
        if not self._filesystem.exists(source):
            return RelocationOutcome.skipped(source, SkipReason.MISSING)
        if not self._filesystem.is_file(source):
            return RelocationOutcome.skipped(source, SkipReason.NOT_A_FILE)

        candidate: CandidateFile | None = None
        try:
            candidate = self._build_candidate(source)
            if candidate.category is Category.UNKNOWN and not self._move_unknown:
                return RelocationOutcome.skipped(source, SkipReason.UNMAPPED_EXTENSION, candidate)

            target_dir = self._policy.category_dir(candidate.category)
            self._policy.ensure_writable(target_dir / source.name)
            self._filesystem.make_dirs(target_dir)
            with self._locks.hold(("target", target_dir)):
                return self._place(candidate, target_dir)
        except (OSError, TidyTreeError) as exc:
            LOGGER.debug("Relocation of %s failed: %s", source, exc)
            return RelocationOutcome.failed(source, exc, candidate)

    def _build_candidate(self, source: Path) -> CandidateFile:
        extension = normalize_extension(source.suffix)
        return CandidateFile(
            path=source,
            extension=extension,
            size_bytes=self._filesystem.stat_size(source),
            category=self._policy.classify(extension),
        )

    def _place(self, candidate: CandidateFile, target_dir: Path) -> RelocationOutcome:
        naive = target_dir / candidate.path.name
        if not self._filesystem.exists(naive):
            self._filesystem.move(candidate.path, naive)
            return RelocationOutcome.moved(candidate, naive)

        if self._filesystem.is_file(naive):
            existing_digest = self._hasher.digest(naive)
            candidate.digest = self._hasher.digest(candidate.path)
            if candidate.digest == existing_digest:
                self._filesystem.delete(candidate.path)
                return RelocationOutcome.duplicate(candidate, naive)

        if self._conflict_resolution == "skip":
            return RelocationOutcome.skipped(candidate.path, SkipReason.NAME_CONFLICT, candidate)

        alternative = self._disambiguate(naive)
        self._policy.ensure_writable(alternative)
        self._filesystem.move(candidate.path, alternative)
        return RelocationOutcome.renamed_and_moved(candidate, alternative)

    def _disambiguate(self, naive: Path) -> Path:
        """Return a free sibling name for ``naive``; caller holds the directory lock."""
        if self._conflict_resolution == "timestamp":
            while True:
                token = f"{time.time_ns()}-{next(self._sequence)}"
                candidate = naive.with_name(f"{token}_{naive.name}")
                if not self._filesystem.exists(candidate):
                    return candidate

        counter = 1
        while True:
            candidate = naive.with_name(f"{naive.stem}-{counter}{naive.suffix}")
            if not self._filesystem.exists(candidate):
                return candidate
            counter += 1


__all__ = ["ConflictStrategy", "FileRelocator"]
