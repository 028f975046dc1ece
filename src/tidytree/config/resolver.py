"""Layered configuration resolution: defaults < file < environment < CLI."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import TidyConfig

ENV_PREFIX = "TIDYTREE__"

# Mappings keyed by data (file extensions such as ".tar.gz"), never by dotted paths.
OPAQUE_SECTIONS = frozenset({"category_overrides"})


def resolve_with_precedence(
    *,
    defaults: TidyConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> TidyConfig:
    """Overlay each source onto ``defaults`` and validate the result.

    Every source may mix nested mappings and dotted keys (``watch.workers``).

    Raises:
        ConfigError: If a source is malformed or the merged values are invalid.
    """
    merged: dict[str, Any] = defaults.model_dump(mode="python")
    for origin, layer in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if layer:
            merged = overlay(merged, expand_dotted(layer, origin=origin))

    try:
        return TidyConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def env_overrides_from(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``TIDYTREE__SECTION__KEY`` variables as dotted keys.

    Values are parsed as YAML so ``true`` and ``4`` arrive typed; anything that
    does not parse is kept as the raw string.
    """
    collected: dict[str, Any] = {}
    for name, raw in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        parts = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
        if not parts:
            continue
        try:
            collected[".".join(parts)] = yaml.safe_load(raw)
        except yaml.YAMLError:
            collected[".".join(parts)] = raw
    return collected


def expand_dotted(layer: Mapping[str, Any], *, origin: str) -> dict[str, Any]:
    """Turn dotted keys into nested mappings, leaving opaque sections untouched."""
    if not isinstance(layer, Mapping):
        raise ConfigError(f"{origin.capitalize()} overrides must be a mapping.")

    tree: dict[str, Any] = {}
    for key, value in layer.items():
        if not isinstance(key, str):
            raise ConfigError(f"{origin.capitalize()} override keys must be strings, got {key!r}.")
        *parents, leaf = key.split(".")
        node = tree
        for part in parents:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise ConfigError(f"{origin.capitalize()} override '{key}' conflicts with '{part}'.")
            node = child

        if isinstance(value, Mapping):
            value = dict(value) if leaf in OPAQUE_SECTIONS else expand_dotted(value, origin=origin)
            existing = node.get(leaf)
            node[leaf] = overlay(existing, value) if isinstance(existing, dict) else value
        else:
            node[leaf] = value
    return tree


def overlay(base: Mapping[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``patch`` merged in; nested mappings merge key by key."""
    result = dict(base)
    for key, value in patch.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = overlay(current, value)
        else:
            result[key] = deepcopy(value)
    return result


__all__ = [
    "ENV_PREFIX",
    "OPAQUE_SECTIONS",
    "env_overrides_from",
    "expand_dotted",
    "overlay",
    "resolve_with_precedence",
]
