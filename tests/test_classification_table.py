"""Tests for extension based classification."""

import pytest

from tidytree.classification import (
    DEFAULT_CATEGORY_MAP,
    Category,
    ClassificationTable,
    normalize_extension,
    parse_category,
)
from tidytree.config import ConfigError


def test_default_table_covers_known_extensions() -> None:
    table = ClassificationTable()

    assert table.lookup(".pcapng") is Category.NETWORK
    assert table.lookup(".sh") is Category.SCRIPTS
    assert table.lookup(".jpeg") is Category.IMAGES
    assert table.lookup(".md") is Category.DOCS
    assert table.lookup(".deb") is Category.BINARY
    assert len(table) == len(DEFAULT_CATEGORY_MAP)


def test_lookup_is_case_insensitive_and_dot_tolerant() -> None:
    table = ClassificationTable()

    assert table.lookup(".PDF") is Category.DOCS
    assert table.lookup("png") is Category.IMAGES


def test_unmapped_and_missing_extensions_are_unknown() -> None:
    table = ClassificationTable()

    assert table.lookup(".xyz") is Category.UNKNOWN
    assert table.lookup("") is Category.UNKNOWN
    assert table.lookup(None) is Category.UNKNOWN


def test_overrides_replace_and_extend_defaults() -> None:
    table = ClassificationTable({".txt": "scripts", "LOG": "Docs"})

    assert table.lookup(".txt") is Category.SCRIPTS
    assert table.lookup(".log") is Category.DOCS
    assert ClassificationTable().lookup(".txt") is Category.DOCS


def test_unknown_override_category_raises() -> None:
    with pytest.raises(ConfigError):
        ClassificationTable({".log": "Logs"})


def test_empty_override_extension_raises() -> None:
    with pytest.raises(ConfigError):
        ClassificationTable({".": "Docs"})


def test_items_are_sorted_by_category_then_extension() -> None:
    items = list(ClassificationTable().items())

    assert items[0] == (".bin", Category.BINARY)
    categories = [category.value for _, category in items]
    assert categories == sorted(categories)


def test_helpers_normalize_inputs() -> None:
    assert normalize_extension("..TXT ") == ".txt"
    assert normalize_extension(None) == ""
    assert parse_category(" network ") is Category.NETWORK
    assert parse_category(Category.IMAGES) is Category.IMAGES
    assert str(Category.BINARY) == "Binary"
