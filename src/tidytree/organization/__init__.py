"""File relocation package."""

from .locks import KeyedLocks
from .models import CandidateFile, OutcomeKind, RelocationOutcome, SkipReason
from .relocator import ConflictStrategy, FileRelocator

__all__ = [
    "CandidateFile",
    "ConflictStrategy",
    "FileRelocator",
    "KeyedLocks",
    "OutcomeKind",
    "RelocationOutcome",
    "SkipReason",
]
