"""Filesystem watch service that reuses the relocation pipeline."""

from __future__ import annotations

import logging
import os
import queue
import threading
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from tidytree.config.models import WatchOptions
from tidytree.errors import WatchStartError
from tidytree.organization.models import RelocationOutcome
from tidytree.organization.relocator import FileRelocator
from tidytree.state import OutcomeRecorder

LOGGER = logging.getLogger(__name__)

ObserverFactory = Callable[[], BaseObserver]
OutcomeCallback = Callable[[RelocationOutcome], None]


class ChangeWatcher:
    """Feed newly created files under the scan root into the relocator.

    Event delivery only enqueues paths onto a bounded queue; a small pool of
    worker threads drains it, so slow hashing or moves never stall the
    observer thread. Exclusion and dedup rules come from the shared relocator
    and are therefore identical to the initial scan.
    """

    def __init__(
        self,
        relocator: FileRelocator,
        recorder: OutcomeRecorder,
        *,
        options: WatchOptions | None = None,
        observer_factory: ObserverFactory | None = None,
        on_outcome: OutcomeCallback | None = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            relocator: Relocator shared with the tree scanner.
            recorder: Outcome sink shared with the tree scanner.
            options: Queue, worker, and observer settings.
            observer_factory: Optional factory for the watchdog observer.
            on_outcome: Optional callable invoked after each processed event.
        """

        self._relocator = relocator
        self._recorder = recorder
        self._policy = relocator.policy
        self._options = options or WatchOptions()
        self._observer_factory = observer_factory
        self._on_outcome = on_outcome
        self._queue: queue.Queue[Optional[Path]] = queue.Queue(maxsize=self._options.queue_size)
        self._stop_event = threading.Event()
        self._state_lock = threading.Lock()
        self._observer: BaseObserver | None = None
        self._workers: list[threading.Thread] = []
        self._accepting = False

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    @property
    def running(self) -> bool:
        return self._accepting

    def start(self) -> None:
        """Subscribe to creation events under the scan root and start workers.

        Raises:
            RuntimeError: If the watcher is already running.
            WatchStartError: If the OS watch cannot be established.
        """

        with self._state_lock:
            if self._observer is not None or self._workers:
                raise RuntimeError("ChangeWatcher is already running.")

            self._stop_event.clear()
            root = self._policy.root
            observer = self._create_observer()
            try:
                observer.schedule(_WatchEventHandler(self), str(root), recursive=True)
                observer.start()
            except (OSError, RuntimeError) as exc:
                raise WatchStartError(f"Unable to watch {root}: {exc}") from exc

            self._observer = observer
            self._workers = [
                threading.Thread(target=self._run_worker, name=f"tidytree-watch-{index}", daemon=True)
                for index in range(self._options.workers)
            ]
            for worker in self._workers:
                worker.start()
            self._accepting = True

        self._recorder.events.process(
            "Watchdog monitoring active. Listening for file system events..."
        )

    def submit(self, path: Path) -> bool:
        """Queue a created path for relocation.

        Args:
            path: Path reported by the filesystem notification.

        Returns:
            bool: True when the path was queued.
        """

        if not self._accepting or self._stop_event.is_set():
            return False
        if self._policy.is_excluded(path):
            return False
        try:
            self._queue.put(path, timeout=self._options.enqueue_timeout_seconds)
        except queue.Full:
            self._recorder.events.warning(
                f"Watch queue full; {path.name} will be organized by the next scan."
            )
            return False
        return True

    def stop(self) -> None:
        """Stop accepting events, drop pending work, and wait for in-flight work.

        Safe to call at any time, including before ``start`` and repeatedly.
        """

        with self._state_lock:
            self._accepting = False
            self._stop_event.set()
            observer, self._observer = self._observer, None
            workers, self._workers = self._workers, []

        timeout = self._options.stop_timeout_seconds
        if observer is not None:
            observer.stop()
            observer.join(timeout=timeout)

        dropped = self._drain_queue()
        # One sentinel per worker unblocks the queue so every worker can exit.
        for _ in workers:
            self._queue.put(None)
        for worker in workers:
            worker.join(timeout=timeout)
        # Sentinels left by workers that did not exit in time must not reach the next start.
        self._drain_queue()

        if dropped:
            self._recorder.events.warning(f"Dropped {dropped} pending watch event(s) on stop.")
        if observer is not None:
            self._recorder.events.info("Watchdog monitoring stopped.")

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _create_observer(self) -> BaseObserver:
        if self._observer_factory is not None:
            return self._observer_factory()
        if self._options.use_polling:
            return PollingObserver(timeout=self._options.polling_interval_seconds)
        return Observer()

    def _run_worker(self) -> None:
        """Consume queued paths until a sentinel arrives."""
        while True:
            path = self._queue.get()
            try:
                if path is None:
                    return
                if self._stop_event.is_set():
                    continue
                settle = self._options.settle_seconds
                if settle > 0 and self._stop_event.wait(settle):
                    continue
                try:
                    self._handle(path)
                except Exception as exc:
                    LOGGER.exception("Watch worker failed while handling %s", path)
                    self._recorder.events.error(f"Failed to handle {path}: {exc}")
            finally:
                self._queue.task_done()

    def _handle(self, path: Path) -> None:
        self._recorder.events.info(f"New file detected: {path}")
        outcome = self._relocator.process(path)
        self._recorder.record(outcome)
        if self._on_outcome is not None:
            self._on_outcome(outcome)

    def _drain_queue(self) -> int:
        dropped = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return dropped
            self._queue.task_done()
            if item is not None:
                dropped += 1


class _WatchEventHandler(FileSystemEventHandler):
    """Forward file creation events into the watcher queue."""

    def __init__(self, watcher: ChangeWatcher) -> None:
        self._watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle a filesystem create event."""
        if event.is_directory:
            return
        self._watcher.submit(Path(os.fsdecode(event.src_path)))

    def on_moved(self, event: FileSystemEvent) -> None:
        """Treat a file renamed into place as created at its destination."""
        if event.is_directory or not event.dest_path:
            return
        self._watcher.submit(Path(os.fsdecode(event.dest_path)))


__all__ = ["ChangeWatcher", "ObserverFactory", "OutcomeCallback"]
