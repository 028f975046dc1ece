"""Observable state models: log entries and organizer counters."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["info", "success", "warning", "error", "process"]
OrganizerStatus = Literal["idle", "scanning", "monitoring", "error"]


class LogEntry(BaseModel):
    """Immutable event stream record."""

    model_config = ConfigDict(frozen=True)

    id: int
    severity: Severity
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class OrganizerStats(BaseModel):
    """Running counters plus the engine status."""

    files_moved: int = 0
    folders_cleaned: int = 0
    duplicates_removed: int = 0
    total_size_bytes: int = 0
    files_failed: int = 0
    files_skipped: int = 0
    status: OrganizerStatus = "idle"


__all__ = ["LogEntry", "OrganizerStats", "OrganizerStatus", "Severity"]
