"""Relocation data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from tidytree.classification import Category


class OutcomeKind(str, Enum):
    """Result classification for a single relocation attempt."""

    MOVED = "moved"
    DUPLICATE_DISCARDED = "duplicate_discarded"
    RENAMED_AND_MOVED = "renamed_and_moved"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, Enum):
    """Why a candidate was left in place without an error."""

    EXCLUDED = "excluded"
    MISSING = "missing"
    NOT_A_FILE = "not_a_file"
    UNMAPPED_EXTENSION = "unmapped_extension"
    NAME_CONFLICT = "name_conflict"


@dataclass(slots=True)
class CandidateFile:
    """A file under consideration for relocation.

    Attributes:
        path: Absolute source path.
        extension: Normalized extension (``""`` when absent).
        size_bytes: Size observed before relocation.
        category: Category assigned by the classification table.
        digest: Content digest, computed only on a name collision.
    """

    path: Path
    extension: str
    size_bytes: int
    category: Category
    digest: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RelocationOutcome:
    """Outcome of processing one candidate.

    Attributes:
        kind: Outcome classification.
        source: Path that was processed.
        destination: Final location for moved files.
        category: Category assigned to the file, when it got that far.
        size_bytes: Size of the processed file, when known.
        reason: Skip reason for ``SKIPPED`` outcomes.
        error: Failure for ``FAILED`` outcomes.
    """

    kind: OutcomeKind
    source: Path
    destination: Optional[Path] = None
    category: Optional[Category] = None
    size_bytes: int = 0
    reason: Optional[SkipReason] = None
    error: Optional[BaseException] = None

    @classmethod
    def moved(cls, candidate: CandidateFile, destination: Path) -> RelocationOutcome:
        return cls(
            kind=OutcomeKind.MOVED,
            source=candidate.path,
            destination=destination,
            category=candidate.category,
            size_bytes=candidate.size_bytes,
        )

    @classmethod
    def renamed_and_moved(cls, candidate: CandidateFile, destination: Path) -> RelocationOutcome:
        return cls(
            kind=OutcomeKind.RENAMED_AND_MOVED,
            source=candidate.path,
            destination=destination,
            category=candidate.category,
            size_bytes=candidate.size_bytes,
        )

    @classmethod
    def duplicate(cls, candidate: CandidateFile, existing: Path) -> RelocationOutcome:
        return cls(
            kind=OutcomeKind.DUPLICATE_DISCARDED,
            source=candidate.path,
            destination=existing,
            category=candidate.category,
            size_bytes=candidate.size_bytes,
        )

    @classmethod
    def skipped(
        cls,
        source: Path,
        reason: SkipReason,
        candidate: CandidateFile | None = None,
    ) -> RelocationOutcome:
        return cls(
            kind=OutcomeKind.SKIPPED,
            source=source,
            category=candidate.category if candidate else None,
            size_bytes=candidate.size_bytes if candidate else 0,
            reason=reason,
        )

    @classmethod
    def failed(
        cls,
        source: Path,
        error: BaseException,
        candidate: CandidateFile | None = None,
    ) -> RelocationOutcome:
        return cls(
            kind=OutcomeKind.FAILED,
            source=source,
            category=candidate.category if candidate else None,
            size_bytes=candidate.size_bytes if candidate else 0,
            error=error,
        )

    @property
    def relocated(self) -> bool:
        """Whether the file now lives in the destination tree."""
        return self.kind in (OutcomeKind.MOVED, OutcomeKind.RENAMED_AND_MOVED)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-ready representation."""
        return {
            "kind": self.kind.value,
            "source": self.source.as_posix(),
            "destination": self.destination.as_posix() if self.destination else None,
            "category": self.category.value if self.category else None,
            "size_bytes": self.size_bytes,
            "reason": self.reason.value if self.reason else None,
            "error": f"{type(self.error).__name__}: {self.error}" if self.error else None,
        }


__all__ = ["CandidateFile", "OutcomeKind", "RelocationOutcome", "SkipReason"]
