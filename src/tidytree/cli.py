"""Command line interface for the tidytree project."""

from __future__ import annotations

import difflib
import time
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax

from tidytree.classification import ClassificationTable
from tidytree.cli_support import categories_table, configure_logging, format_entry, stats_table
from tidytree.config import ConfigError, ConfigManager, TidyConfig, resolve_with_precedence
from tidytree.engine import OrganizerEngine
from tidytree.errors import WatchStartError
from tidytree.ingestion.discovery import ScanSummary
from tidytree.state import LogEntry

console = Console()

_ENTRY_MODES = {"error": "error", "warning": "warning"}


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _parse_override_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse `EXT=CATEGORY` pairs passed on the command line.

    Raises:
        click.BadParameter: If a pair is malformed.
    """

    overrides: dict[str, str] = {}
    for pair in pairs:
        extension, separator, category = pair.partition("=")
        if not separator or not extension.strip() or not category.strip():
            raise click.BadParameter(f"Expected EXT=CATEGORY, got '{pair}'.", param_hint="--override")
        overrides[extension.strip()] = category.strip()
    return overrides


def _load_config(cli_overrides: dict[str, Any] | None, *, json_output: bool) -> TidyConfig:
    try:
        manager = ConfigManager()
        manager.ensure_exists()
        return manager.load(cli_overrides=cli_overrides)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        raise  # pragma: no cover - _handle_cli_error always raises


def _emit_scan_summary(
    engine: OrganizerEngine,
    summary: ScanSummary,
    *,
    quiet: bool,
    summary_only: bool,
) -> None:
    _emit_message(
        _format_summary_line("Scan", summary.root, summary.counts()),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )
    _emit_message(stats_table(engine.snapshot()), mode="detail", quiet=quiet, summary_only=summary_only)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="tidytree")
def cli() -> None:
    """tidytree sorts chaotic directory trees into categories and keeps them tidy."""


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option(
    "--dest",
    "destination",
    type=click.Path(file_okay=False, path_type=str),
    help="Destination root for sorted files (default: a 'Sorted' sibling of ROOT).",
)
@click.option(
    "-x",
    "--exclude",
    "exclude",
    multiple=True,
    help="Additional directory name to skip; repeatable.",
)
@click.option("--once", is_flag=True, help="Scan once and exit without watching.")
@click.option("--poll", is_flag=True, help="Use the polling observer instead of OS notifications.")
@click.option("--log-level", type=str, help="Override the configured logging level.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of rich text.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def run(
    ctx: click.Context,
    root: str,
    destination: str | None,
    exclude: tuple[str, ...],
    once: bool,
    poll: bool,
    log_level: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Organize ROOT, then keep watching it for new files.

    Args:
        ctx: Click context for parameter source inspection.
        root: Directory tree to organize.
        destination: Optional destination root.
        exclude: Extra directory name tokens to skip.
        once: When True, stop after the initial scan.
        poll: When True, use the polling observer.
        log_level: Optional logging level override.
        json_output: When True, emit JSON payloads instead of text.
        summary_mode: When True, restrict output to summary/warning lines.
        quiet: When True, suppress non-error output entirely.

    Raises:
        click.ClickException: If option combinations or paths are invalid.
    """

    cli_overrides: dict[str, Any] = {}
    if poll:
        cli_overrides["watch.use_polling"] = True
    config = _load_config(cli_overrides or None, json_output=json_output)

    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if quiet_enabled and explicit_quiet:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if summary_only and explicit_summary:
            raise click.ClickException("--json cannot be combined with --summary.")
        quiet_enabled = summary_only = False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )

    try:
        configure_logging(config.logging, level_override=log_level)
        engine = OrganizerEngine(
            root,
            destination=destination,
            exclusions=[*config.organization.exclusions, *exclude],
            config=config,
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    def _print_entry(entry: LogEntry) -> None:
        if json_output:
            if not once:
                console.print_json(data={"event": entry.model_dump(mode="json")})
            return
        _emit_message(
            format_entry(entry),
            mode=_ENTRY_MODES.get(entry.severity, "detail"),
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    engine.events.subscribe(_print_entry)

    if once:
        summary = engine.scan()
        if json_output:
            console.print_json(
                data={
                    "summary": summary.to_dict(),
                    "stats": engine.snapshot().model_dump(mode="json"),
                    "destination": engine.destination.as_posix(),
                }
            )
            return
        _emit_scan_summary(engine, summary, quiet=quiet_enabled, summary_only=summary_only)
        return

    try:
        summary = engine.start()
    except WatchStartError as exc:
        _handle_cli_error(str(exc), code="watch_start_error", json_output=json_output, original=exc)
        return

    if not json_output:
        _emit_scan_summary(engine, summary, quiet=quiet_enabled, summary_only=summary_only)
        _emit_message(
            f"[cyan]Watching {engine.root}. Press Ctrl+C to stop.[/cyan]",
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        engine.stop()
        if not json_output:
            _emit_message(
                stats_table(engine.snapshot()),
                mode="summary",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )


@cli.command()
@click.option(
    "--override",
    "overrides",
    multiple=True,
    help="Extra EXT=CATEGORY mapping applied on top of the configuration; repeatable.",
)
def categories(overrides: tuple[str, ...]) -> None:
    """Show the effective extension to category mapping.

    Args:
        overrides: Additional `EXT=CATEGORY` pairs.

    Raises:
        click.ClickException: If the configuration or an override is invalid.
    """

    config = _load_config(None, json_output=False)
    merged = dict(config.organization.category_overrides)
    merged.update(_parse_override_pairs(overrides))
    try:
        table = ClassificationTable(merged)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(categories_table(table))


@cli.group()
def config() -> None:
    """Manage tidytree configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        file_data = manager.raw()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    before = manager.text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'watch.workers'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=TidyConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.write(file_data)
    after = manager.text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    # The timestamp header always changes; only report real edits.
    meaningful = [
        line
        for line in diff
        if line.startswith(("+", "-"))
        and not line.startswith(("+++", "---", "+# Last updated", "-# Last updated"))
    ]
    if not meaningful:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=TidyConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.write(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a nested value within a dictionary for a dotted path.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """

    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
