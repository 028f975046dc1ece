"""Observable organizer state: event stream and counters."""

from .events import EntryCallback, EventLog
from .models import LogEntry, OrganizerStats, OrganizerStatus, Severity
from .recorder import OutcomeRecorder
from .stats import StatsAggregator, StatsCallback

__all__ = [
    "EntryCallback",
    "EventLog",
    "LogEntry",
    "OrganizerStats",
    "OrganizerStatus",
    "OutcomeRecorder",
    "Severity",
    "StatsAggregator",
    "StatsCallback",
]
