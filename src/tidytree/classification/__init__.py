"""Classification package."""

from .table import (
    DEFAULT_CATEGORY_MAP,
    Category,
    ClassificationTable,
    normalize_extension,
    parse_category,
)

__all__ = [
    "DEFAULT_CATEGORY_MAP",
    "Category",
    "ClassificationTable",
    "normalize_extension",
    "parse_category",
]
