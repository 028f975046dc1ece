"""CLI integration tests for the `tidytree` command."""

from __future__ import annotations

import json
import os
from pathlib import Path

from click.testing import CliRunner

from tidytree.cli import cli


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory."""
    env = {key: value for key, value in os.environ.items() if not key.startswith("TIDYTREE__")}
    env["HOME"] = str(tmp_path / "home")
    return env


def _seed_root(tmp_path: Path) -> Path:
    root = tmp_path / "root"
    (root / "a" / "b").mkdir(parents=True)
    (root / "a" / "c").mkdir()
    (root / "a" / "report.pdf").write_bytes(b"%PDF-1.7")
    (root / "a" / "b" / "dup.png").write_bytes(b"\x89PNG same")
    (root / "a" / "c" / "dup.png").write_bytes(b"\x89PNG same")
    (root / ".git").mkdir()
    (root / ".git" / "hook.sh").write_text("#!/bin/sh", encoding="utf-8")
    return root


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "tidytree sorts chaotic directory trees" in result.output
    for command in ("run", "categories", "config"):
        assert command in result.output


def test_run_once_organizes_tree(tmp_path: Path) -> None:
    root = _seed_root(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["run", str(root), "--once"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    sorted_dir = tmp_path / "Sorted"
    assert (sorted_dir / "Docs" / "report.pdf").exists()
    assert [path.name for path in (sorted_dir / "Images").iterdir()] == ["dup.png"]
    assert not (root / "a").exists()
    assert (root / ".git" / "hook.sh").exists()
    assert "Scan summary for" in result.output
    assert "Organizer stats" in result.output


def test_run_once_json_reports_summary(tmp_path: Path) -> None:
    root = _seed_root(tmp_path)
    dest = tmp_path / "out"
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["run", str(root), "--once", "--json", "--dest", str(dest), "--log-level", "error"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    counts = payload["summary"]["counts"]
    assert counts["moved"] == 2
    assert counts["duplicates"] == 1
    assert counts["folders_cleaned"] == 3
    assert payload["stats"]["status"] == "idle"
    assert payload["destination"] == dest.resolve().as_posix()


def test_run_extra_exclusions_are_respected(tmp_path: Path) -> None:
    root = tmp_path / "root"
    (root / "keep").mkdir(parents=True)
    (root / "keep" / "notes.md").write_text("# keep", encoding="utf-8")
    (root / "tool.exe").write_bytes(b"MZ")
    runner = CliRunner()

    result = runner.invoke(
        cli, ["run", str(root), "--once", "-x", "keep"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    assert (root / "keep" / "notes.md").exists()
    assert (tmp_path / "Sorted" / "Binary" / "tool.exe").exists()


def test_run_rejects_destination_equal_to_root(tmp_path: Path) -> None:
    root = tmp_path / "root"
    root.mkdir()
    runner = CliRunner()

    result = runner.invoke(
        cli, ["run", str(root), "--once", "--dest", str(root)], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert "Destination must differ" in result.output


def test_run_json_and_quiet_conflict(tmp_path: Path) -> None:
    root = tmp_path / "root"
    root.mkdir()
    runner = CliRunner()

    result = runner.invoke(
        cli, ["run", str(root), "--once", "--json", "--quiet"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert "--json cannot be combined with --quiet" in result.output


def test_categories_lists_mapping_with_overrides(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli, ["categories", "--override", ".log=Docs"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    assert ".pcapng" in result.output
    assert "19 extensions mapped" in result.output
    assert ".log" in result.output
    assert "Network" in result.output


def test_categories_rejects_unknown_category(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli, ["categories", "--override", ".log=Logs"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert "Unknown category" in result.output


def test_config_set_then_view(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    set_result = runner.invoke(cli, ["config", "set", "watch.workers", "--value", "4"], env=env)
    view_result = runner.invoke(cli, ["config", "view", "--no-env"], env=env)

    assert set_result.exit_code == 0, set_result.output
    assert "Updated watch.workers" in set_result.output
    assert view_result.exit_code == 0, view_result.output
    assert "workers: 4" in view_result.output
    config_text = (tmp_path / "home" / ".tidytree" / "config.yaml").read_text(encoding="utf-8")
    assert "workers: 4" in config_text


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["config", "set", "organization.conflict_resolution", "--value", "overwrite"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code != 0
    assert "Invalid configuration values" in result.output
