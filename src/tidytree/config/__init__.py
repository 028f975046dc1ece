"""Configuration loading and persistence for tidytree."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import TidyConfig
from .resolver import env_overrides_from, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.tidytree/config.yaml")
_HEADER = (
    "# tidytree configuration file\n"
    "# Manage with `tidytree config set KEY --value VALUE` or `tidytree config edit`.\n"
)


class ConfigManager:
    """Own the YAML configuration file and resolve the effective ``TidyConfig``.

    The file is written with the defaults on first use. Environment variables
    and CLI flags are layered on top at load time and never written back.
    """

    def __init__(
        self,
        path: Path | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._path = (path or DEFAULT_CONFIG_PATH).expanduser()
        self._environ = os.environ if environ is None else environ

    @property
    def path(self) -> Path:
        return self._path

    def ensure_exists(self) -> Path:
        """Write the default configuration unless a file is already present."""
        if not self._path.exists():
            self.write(TidyConfig())
        return self._path

    def load(
        self,
        cli_overrides: Mapping[str, Any] | None = None,
        *,
        include_env: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> TidyConfig:
        """Resolve defaults, the file, the environment, and CLI flags.

        Args:
            cli_overrides: Dotted-key overrides taking highest precedence.
            include_env: Whether ``TIDYTREE__`` variables are applied.
            env_overrides: Environment to read instead of ``os.environ``.

        Returns:
            TidyConfig: The validated configuration.

        Raises:
            ConfigError: If the file cannot be parsed or a value is invalid.
        """
        environment: dict[str, Any] = {}
        if include_env:
            environment = env_overrides_from(
                self._environ if env_overrides is None else env_overrides
            )
        return resolve_with_precedence(
            defaults=TidyConfig(),
            file_overrides=self.raw(),
            env_overrides=environment,
            cli_overrides=cli_overrides,
        )

    def raw(self) -> dict[str, Any]:
        """Return the mapping stored in the file; empty when there is no file.

        Raises:
            ConfigError: If the file is not valid YAML or not a mapping.
        """
        text = self.text()
        try:
            data = yaml.safe_load(text) if text.strip() else None
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self._path}: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self._path} must contain a mapping at the top level.")
        return data

    def text(self) -> str:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    def write(self, data: TidyConfig | Mapping[str, Any]) -> None:
        """Persist ``data`` with the header and a fresh timestamp."""
        payload = data.model_dump(mode="python") if isinstance(data, TidyConfig) else dict(data)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = yaml.safe_dump(payload, sort_keys=False)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(f"{_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8")


__all__ = [
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "TidyConfig",
    "resolve_with_precedence",
]
