"""Configuration models describing tidytree settings."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_EXCLUSIONS = [".git", ".svn", ".hg", ".idea", "node_modules", "CTF_Writeup"]


class TidyBaseModel(BaseModel):
    """Shared configuration for tidytree Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class OrganizationOptions(TidyBaseModel):
    """Settings that govern how files are relocated.

    Attributes:
        destination: Destination root; defaults to a ``Sorted`` sibling of the scanned root.
        exclusions: Directory name tokens that are never traversed.
        category_overrides: Extension to category mappings merged over the defaults.
        move_unknown: Whether files with unmapped extensions go to ``Unknown``.
        conflict_resolution: Strategy used when a same-named file with different content exists.
        prune_empty_dirs: Whether directories left empty by a scan are removed.
    """

    destination: Optional[str] = None
    exclusions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUSIONS))
    category_overrides: Dict[str, str] = Field(default_factory=dict)
    move_unknown: bool = True
    conflict_resolution: Literal["append_number", "timestamp", "skip"] = "append_number"
    prune_empty_dirs: bool = True


class HashingOptions(TidyBaseModel):
    """Content hashing options used for duplicate detection.

    Attributes:
        algorithm: hashlib algorithm name.
        chunk_size_bytes: Size of each sequential read.
    """

    algorithm: Literal["sha256", "sha512", "blake2b"] = "sha256"
    chunk_size_bytes: int = Field(default=64 * 1024, gt=0)


class WatchOptions(TidyBaseModel):
    """Settings for the live watcher.

    Attributes:
        queue_size: Maximum number of created paths waiting for a worker.
        workers: Number of worker threads draining the queue.
        enqueue_timeout_seconds: How long event delivery may block on a full queue.
        settle_seconds: Delay before a created file is processed.
        use_polling: Use the polling observer instead of native OS notifications.
        polling_interval_seconds: Poll interval when ``use_polling`` is enabled.
        stop_timeout_seconds: Upper bound for joining observer and worker threads.
    """

    queue_size: int = Field(default=256, gt=0)
    workers: int = Field(default=2, gt=0)
    enqueue_timeout_seconds: float = Field(default=1.0, ge=0)
    settle_seconds: float = Field(default=0.25, ge=0)
    use_polling: bool = False
    polling_interval_seconds: float = Field(default=1.0, gt=0)
    stop_timeout_seconds: float = Field(default=5.0, gt=0)


class EventLogOptions(TidyBaseModel):
    """Event stream retention.

    Attributes:
        buffer_size: Number of recent log entries kept for live display.
    """

    buffer_size: int = Field(default=50, gt=0)


class LoggingSettings(TidyBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file path; rotated when set.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 100
    backup_count: int = 5


class CLIOptions(TidyBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class TidyConfig(TidyBaseModel):
    """Top-level configuration struct for tidytree.

    Attributes:
        organization: Relocation settings.
        hashing: Duplicate detection settings.
        watch: Live watcher settings.
        events: Event stream settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    organization: OrganizationOptions = Field(default_factory=OrganizationOptions)
    hashing: HashingOptions = Field(default_factory=HashingOptions)
    watch: WatchOptions = Field(default_factory=WatchOptions)
    events: EventLogOptions = Field(default_factory=EventLogOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_EXCLUSIONS",
    "TidyBaseModel",
    "OrganizationOptions",
    "HashingOptions",
    "WatchOptions",
    "EventLogOptions",
    "LoggingSettings",
    "CLIOptions",
    "TidyConfig",
]
