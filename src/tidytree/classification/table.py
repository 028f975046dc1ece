"""Extension based file classification."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping

from tidytree.config.exceptions import ConfigError


class Category(str, Enum):
    """Closed set of destination categories."""

    NETWORK = "Network"
    SCRIPTS = "Scripts"
    IMAGES = "Images"
    DOCS = "Docs"
    BINARY = "Binary"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


DEFAULT_CATEGORY_MAP: Mapping[str, Category] = MappingProxyType(
    {
        ".pcap": Category.NETWORK,
        ".pcapng": Category.NETWORK,
        ".cap": Category.NETWORK,
        ".py": Category.SCRIPTS,
        ".sh": Category.SCRIPTS,
        ".js": Category.SCRIPTS,
        ".ts": Category.SCRIPTS,
        ".png": Category.IMAGES,
        ".jpg": Category.IMAGES,
        ".jpeg": Category.IMAGES,
        ".gif": Category.IMAGES,
        ".pdf": Category.DOCS,
        ".docx": Category.DOCS,
        ".txt": Category.DOCS,
        ".md": Category.DOCS,
        ".exe": Category.BINARY,
        ".deb": Category.BINARY,
        ".bin": Category.BINARY,
    }
)


def normalize_extension(extension: str | None) -> str:
    """Return ``extension`` lower-cased with exactly one leading dot.

    Empty or missing extensions normalize to an empty string.
    """
    if not extension:
        return ""
    cleaned = extension.strip().lower().lstrip(".")
    return f".{cleaned}" if cleaned else ""


def parse_category(label: str | Category) -> Category:
    """Resolve a category label case-insensitively.

    Raises:
        ConfigError: If ``label`` does not name a known category.
    """
    if isinstance(label, Category):
        return label
    wanted = str(label).strip().lower()
    for category in Category:
        if category.value.lower() == wanted:
            return category
    known = ", ".join(category.value for category in Category)
    raise ConfigError(f"Unknown category '{label}'. Expected one of: {known}.")


class ClassificationTable:
    """Read-only extension to category lookup with optional overrides."""

    def __init__(
        self,
        overrides: Mapping[str, str | Category] | None = None,
        *,
        base: Mapping[str, Category] | None = None,
    ) -> None:
        table = dict(DEFAULT_CATEGORY_MAP if base is None else base)
        for extension, label in (overrides or {}).items():
            key = normalize_extension(extension)
            if not key:
                raise ConfigError(f"Category override has an empty extension: {extension!r}")
            table[key] = parse_category(label)
        self._table: Mapping[str, Category] = MappingProxyType(table)

    def lookup(self, extension: str | None) -> Category:
        """Return the category for ``extension``; never fails."""
        return self._table.get(normalize_extension(extension), Category.UNKNOWN)

    def items(self) -> Iterator[tuple[str, Category]]:
        """Yield ``(extension, category)`` pairs sorted by category then extension."""
        yield from sorted(self._table.items(), key=lambda item: (item[1].value, item[0]))

    def __len__(self) -> int:
        return len(self._table)
