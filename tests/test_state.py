"""Tests for the event log, stats aggregation, and outcome recording."""

import threading
from pathlib import Path

import pytest

from tidytree.classification import Category
from tidytree.organization import OutcomeKind, RelocationOutcome, SkipReason
from tidytree.organization.models import CandidateFile
from tidytree.state import EventLog, LogEntry, OrganizerStats, OutcomeRecorder, StatsAggregator


def _candidate(name: str = "a.pdf", size: int = 10) -> CandidateFile:
    return CandidateFile(
        path=Path("/data/root") / name,
        extension=Path(name).suffix,
        size_bytes=size,
        category=Category.DOCS,
    )


def test_event_log_keeps_only_latest_entries() -> None:
    log = EventLog(capacity=3)
    for index in range(5):
        log.info(f"entry {index}")

    entries = log.entries()

    assert [entry.message for entry in entries] == ["entry 2", "entry 3", "entry 4"]
    assert [entry.id for entry in entries] == [3, 4, 5]


def test_event_log_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        EventLog(capacity=0)


def test_subscribers_receive_entries_until_unsubscribed() -> None:
    log = EventLog()
    received: list[LogEntry] = []
    unsubscribe = log.subscribe(received.append)

    log.success("first")
    unsubscribe()
    log.error("second")
    unsubscribe()

    assert [(entry.severity, entry.message) for entry in received] == [("success", "first")]
    assert len(log.entries()) == 2


def test_entries_are_mirrored_to_logging(caplog: pytest.LogCaptureFixture) -> None:
    log = EventLog()

    with caplog.at_level("INFO", logger="tidytree"):
        log.warning("careful")

    assert any("careful" in record.getMessage() for record in caplog.records)


def test_stats_aggregator_counts_each_kind() -> None:
    stats = StatsAggregator()
    candidate = _candidate(size=100)

    stats.apply(RelocationOutcome.moved(candidate, Path("/dest/Docs/a.pdf")))
    stats.apply(RelocationOutcome.renamed_and_moved(candidate, Path("/dest/Docs/a-1.pdf")))
    stats.apply(RelocationOutcome.duplicate(candidate, Path("/dest/Docs/a.pdf")))
    stats.apply(RelocationOutcome.failed(candidate.path, OSError("boom")))
    stats.apply(RelocationOutcome.skipped(candidate.path, SkipReason.MISSING))
    stats.folder_cleaned()

    snapshot = stats.snapshot()

    assert snapshot == OrganizerStats(
        files_moved=2,
        folders_cleaned=1,
        duplicates_removed=1,
        total_size_bytes=200,
        files_failed=1,
        files_skipped=1,
    )


def test_stats_snapshots_are_copies_and_notify_subscribers() -> None:
    stats = StatsAggregator()
    seen: list[OrganizerStats] = []
    stats.subscribe(seen.append)

    stats.set_status("scanning")
    snapshot = stats.snapshot()
    snapshot.files_moved = 99

    assert stats.status == "scanning"
    assert stats.snapshot().files_moved == 0
    assert [item.status for item in seen] == ["scanning"]


def test_stats_updates_are_serialized() -> None:
    stats = StatsAggregator()
    outcome = RelocationOutcome.moved(_candidate(size=1), Path("/dest/Docs/a.pdf"))

    def work() -> None:
        for _ in range(500):
            stats.apply(outcome)

    threads = [threading.Thread(target=work) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert stats.snapshot().files_moved == 2000
    assert stats.snapshot().total_size_bytes == 2000


def test_recorder_messages_follow_outcome_kind() -> None:
    recorder = OutcomeRecorder(EventLog(), StatsAggregator())
    candidate = _candidate("dup.png")

    recorder.record(RelocationOutcome.moved(candidate, Path("/dest/Docs/dup.png")))
    recorder.record(RelocationOutcome.renamed_and_moved(candidate, Path("/dest/Docs/dup-1.png")))
    recorder.record(RelocationOutcome.duplicate(candidate, Path("/dest/Docs/dup.png")))
    recorder.record(RelocationOutcome.failed(candidate.path, OSError("denied")))
    recorder.record(RelocationOutcome.skipped(candidate.path, SkipReason.EXCLUDED))
    recorder.folder_removed(Path("/data/root/empty"))

    entries = [(entry.severity, entry.message) for entry in recorder.events.entries()]

    assert entries[0] == ("success", "Moved dup.png -> Docs/")
    assert entries[1][0] == "success" and "dup-1.png" in entries[1][1]
    assert entries[2] == ("info", "Duplicate found. Deleted source: /data/root/dup.png")
    assert entries[3][0] == "error" and "denied" in entries[3][1]
    assert entries[4] == ("success", "Deleted empty directory: /data/root/empty")
    assert len(entries) == 5
    assert recorder.stats.snapshot().files_skipped == 1


def test_outcome_kind_values_are_stable() -> None:
    assert OutcomeKind.DUPLICATE_DISCARDED.value == "duplicate_discarded"
    payload = RelocationOutcome.failed(Path("/x"), OSError("nope")).to_dict()
    assert payload["kind"] == "failed"
    assert payload["error"] == "OSError: nope"


def test_renamed_outcome_without_destination_uses_source_name() -> None:
    recorder = OutcomeRecorder(EventLog(), StatsAggregator())
    outcome = RelocationOutcome(
        kind=OutcomeKind.RENAMED_AND_MOVED,
        source=Path("/data/root/run.sh"),
        category=Category.SCRIPTS,
    )

    recorder.record(outcome)

    entry = recorder.events.entries()[-1]
    assert entry.severity == "success"
    assert entry.message.startswith("Moved run.sh -> Scripts/run.sh")
