"""Organizer engine: wiring and status lifecycle."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Mapping

from tidytree.classification import ClassificationTable
from tidytree.config import ConfigError, TidyConfig
from tidytree.errors import WatchStartError
from tidytree.filesystem import FileSystem, LocalFileSystem
from tidytree.ingestion import HashService, PathPolicy
from tidytree.ingestion.discovery import ScanSummary, TreeScanner
from tidytree.organization import FileRelocator, KeyedLocks, RelocationOutcome
from tidytree.state import EventLog, OrganizerStats, OrganizerStatus, OutcomeRecorder, StatsAggregator
from tidytree.watch import ChangeWatcher, ObserverFactory

LOGGER = logging.getLogger(__name__)

DEFAULT_DESTINATION_NAME = "Sorted"


class OrganizerEngine:
    """Scan a root once, then keep it organized while watching for new files.

    Status moves ``idle -> scanning -> monitoring`` through ``start`` and back to
    ``idle`` on ``stop``. A failed watcher start leaves the engine in ``error``.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        destination: Path | str | None = None,
        exclusions: Iterable[str] | None = None,
        category_overrides: Mapping[str, str] | None = None,
        config: TidyConfig | None = None,
        filesystem: FileSystem | None = None,
        event_log: EventLog | None = None,
        stats: StatsAggregator | None = None,
        observer_factory: ObserverFactory | None = None,
    ) -> None:
        """Resolve paths and build the organizer components.

        Args:
            root: Tree to organize.
            destination: Relocation target; defaults to ``organization.destination``
                or a ``Sorted`` sibling of ``root``.
            exclusions: Name tokens never traversed; defaults to
                ``organization.exclusions``. The destination name is always added.
            category_overrides: Extension to category mappings merged over the
                configured overrides.
            config: Loaded configuration; defaults are used when omitted.
            filesystem: Filesystem implementation; the local disk by default.
            event_log: Shared event stream; created when omitted.
            stats: Shared stats aggregator; created when omitted.
            observer_factory: Optional watchdog observer factory for the watcher.

        Raises:
            ConfigError: If the paths or overrides are unusable.
        """

        self._config = config or TidyConfig()
        organization = self._config.organization
        self._filesystem = filesystem or LocalFileSystem()

        self._root = self._filesystem.resolve(root)
        destination = destination if destination is not None else organization.destination
        if destination is None:
            self._destination = self._root.parent / DEFAULT_DESTINATION_NAME
        else:
            self._destination = self._filesystem.resolve(destination)
        self._validate_paths()

        overrides = dict(organization.category_overrides)
        overrides.update(category_overrides or {})
        table = ClassificationTable(overrides)

        tokens = list(organization.exclusions if exclusions is None else exclusions)
        self._policy = PathPolicy(self._root, self._destination, tokens, table)

        self.events = event_log or EventLog(self._config.events.buffer_size)
        self.stats = stats or StatsAggregator()
        self._recorder = OutcomeRecorder(self.events, self.stats)

        hashing = self._config.hashing
        self._hasher = HashService(
            self._filesystem,
            algorithm=hashing.algorithm,
            chunk_size=hashing.chunk_size_bytes,
        )
        self._relocator = FileRelocator(
            self._filesystem,
            self._policy,
            self._hasher,
            move_unknown=organization.move_unknown,
            conflict_resolution=organization.conflict_resolution,
            locks=KeyedLocks(),
        )
        self._scanner = TreeScanner(
            self._filesystem,
            self._policy,
            self._relocator,
            self._recorder,
            prune_empty_dirs=organization.prune_empty_dirs,
        )
        self._watcher = ChangeWatcher(
            self._relocator,
            self._recorder,
            options=self._config.watch,
            observer_factory=observer_factory,
        )

    # ------------------------------------------------------------------ #
    # Properties                                                         #
    # ------------------------------------------------------------------ #

    @property
    def root(self) -> Path:
        return self._root

    @property
    def destination(self) -> Path:
        return self._destination

    @property
    def policy(self) -> PathPolicy:
        return self._policy

    @property
    def relocator(self) -> FileRelocator:
        return self._relocator

    @property
    def watcher(self) -> ChangeWatcher:
        return self._watcher

    @property
    def status(self) -> OrganizerStatus:
        return self.stats.status

    # ------------------------------------------------------------------ #
    # Lifecycle                                                          #
    # ------------------------------------------------------------------ #

    def scan(self) -> ScanSummary:
        """Run one bottom-up pass over the root and return to ``idle``."""
        summary = self._run_scan()
        self.stats.set_status("idle")
        return summary

    def start(self) -> ScanSummary:
        """Run the initial scan, then switch to live monitoring.

        Raises:
            WatchStartError: If the watcher cannot be started; status becomes ``error``.
        """
        summary = self._run_scan()
        try:
            self._watcher.start()
        except WatchStartError as exc:
            self.stats.set_status("error")
            self.events.error(f"Unable to start monitoring: {exc}")
            raise
        self.stats.set_status("monitoring")
        return summary

    def stop(self) -> None:
        """Stop monitoring; in-flight relocations finish, queued ones are dropped."""
        was_running = self._watcher.running
        self._watcher.stop()
        self.stats.set_status("idle")
        if was_running:
            self.events.error("Service halted by user.")

    def process(self, path: Path | str) -> RelocationOutcome:
        """Organize a single file with the same rules as scan and watch."""
        outcome = self._relocator.process(Path(path))
        self._recorder.record(outcome)
        return outcome

    def snapshot(self) -> OrganizerStats:
        return self.stats.snapshot()

    def __enter__(self) -> OrganizerEngine:
        return self

    def __exit__(self, *_: object) -> None:
        self.stop()

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _run_scan(self) -> ScanSummary:
        if self._watcher.running:
            raise RuntimeError("Cannot scan while monitoring is active; call stop() first.")
        self.stats.set_status("scanning")
        try:
            summary = self._scanner.scan()
        except Exception:
            self.stats.set_status("error")
            raise
        LOGGER.debug("Scan of %s finished: %s", self._root, summary.counts())
        return summary

    def _validate_paths(self) -> None:
        root, destination = self._root, self._destination
        if not self._filesystem.is_dir(root):
            raise ConfigError(f"Root directory does not exist or is not a directory: {root}")
        if root == destination:
            raise ConfigError("Destination must differ from the root directory.")
        if root.is_relative_to(destination):
            raise ConfigError(
                f"Root {root} lies inside destination {destination}; "
                "the organizer would re-process its own output."
            )
        if self._filesystem.exists(destination) and not self._filesystem.is_dir(destination):
            raise ConfigError(f"Destination exists and is not a directory: {destination}")


__all__ = ["DEFAULT_DESTINATION_NAME", "OrganizerEngine"]
