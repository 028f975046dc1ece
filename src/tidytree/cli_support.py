"""Helpers shared by the CLI: logging setup and rich rendering."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from tidytree.classification import ClassificationTable
from tidytree.config import ConfigError
from tidytree.config.models import LoggingSettings
from tidytree.state import LogEntry, OrganizerStats

PACKAGE_LOGGER = "tidytree"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

SEVERITY_STYLES = {
    "info": "white",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "process": "blue",
}

SEVERITY_MARKERS = {
    "info": "•",
    "success": "✔",
    "warning": "!",
    "error": "✖",
    "process": "…",
}


def configure_logging(
    settings: LoggingSettings,
    *,
    level_override: str | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Attach rich console and optional rotating file handlers to the package logger.

    Args:
        settings: Logging section of the loaded configuration.
        level_override: Optional level name taking precedence over ``settings.level``.
        console: Console used by the rich handler; stderr by default.

    Returns:
        logging.Logger: The configured package logger.

    Raises:
        ConfigError: If the level name or log file is unusable.
    """

    level_name = (level_override or settings.level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ConfigError(f"Unknown logging level '{level_name}'.")

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_tidytree_managed", False):
            logger.removeHandler(handler)
            handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    rich_handler._tidytree_managed = True  # type: ignore[attr-defined]
    logger.addHandler(rich_handler)

    if settings.file:
        log_path = Path(settings.file).expanduser()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=max(1, settings.max_size_mb) * 1024 * 1024,
                backupCount=max(0, settings.backup_count),
                encoding="utf-8",
            )
        except OSError as exc:
            raise ConfigError(f"Unable to open log file {log_path}: {exc}") from exc
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler._tidytree_managed = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    return logger


def format_bytes(size: float) -> str:
    """Return ``size`` in human readable units (B, KB, MB, GB, TB)."""
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    index = 0
    while size >= 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    return f"{round(size, 2):g} {units[index]}"


def format_entry(entry: LogEntry) -> str:
    """Render a log entry as rich markup."""
    style = SEVERITY_STYLES[entry.severity]
    marker = SEVERITY_MARKERS[entry.severity]
    stamp = escape(f"[{entry.timestamp.astimezone():%H:%M:%S}]")
    return f"[dim]{stamp}[/dim] [{style}]{marker} {escape(entry.message)}[/{style}]"


def stats_table(stats: OrganizerStats) -> Table:
    """Build the stats widget shown after a run."""
    table = Table(title="Organizer stats", show_header=True, header_style="bold")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Files moved", str(stats.files_moved))
    table.add_row("Folders cleaned", str(stats.folders_cleaned))
    table.add_row("Duplicates removed", str(stats.duplicates_removed))
    table.add_row("Total size", format_bytes(stats.total_size_bytes))
    table.add_row("Failed", str(stats.files_failed))
    table.add_row("Skipped", str(stats.files_skipped))
    table.add_row("Status", stats.status)
    return table


def categories_table(table: ClassificationTable) -> Table:
    """Build a table listing the effective extension mapping."""
    rendered = Table(
        title="Categories",
        caption=f"{len(table)} extensions mapped",
        show_header=True,
        header_style="bold",
    )
    rendered.add_column("Extension")
    rendered.add_column("Category")
    for extension, category in table.items():
        rendered.add_row(extension, category.value)
    return rendered


__all__ = [
    "PACKAGE_LOGGER",
    "configure_logging",
    "format_bytes",
    "format_entry",
    "stats_table",
    "categories_table",
]
