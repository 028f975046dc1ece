"""Path exclusion and destination safety rules."""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Iterable

from tidytree.classification import Category, ClassificationTable
from tidytree.errors import PolicyViolation


class PathPolicy:
    """Decide which paths are traversed and where files may be written.

    The destination directory name is always part of the exclusion set so the
    organizer never walks into, or re-ingests, its own output.
    """

    def __init__(
        self,
        root: Path,
        destination: Path,
        exclusions: Iterable[str] = (),
        table: ClassificationTable | None = None,
    ) -> None:
        self._root = root
        self._destination = destination
        tokens = {token.strip() for token in exclusions if token and token.strip()}
        tokens.add(destination.name)
        self._exclusions = frozenset(tokens)
        self._table = table or ClassificationTable()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def destination(self) -> Path:
        return self._destination

    @property
    def exclusions(self) -> frozenset[str]:
        return self._exclusions

    @property
    def table(self) -> ClassificationTable:
        return self._table

    def is_excluded(self, path: PurePath) -> bool:
        """Return whether ``path`` belongs to an excluded subtree.

        Tokens are matched exactly against each component below the scan root
        (or every component for paths outside it). Anything inside the
        destination tree is excluded as well.
        """
        if path == self._destination or path.is_relative_to(self._destination):
            return True
        if path.is_relative_to(self._root):
            parts = path.relative_to(self._root).parts
        else:
            parts = path.parts
        return any(part in self._exclusions for part in parts)

    def classify(self, extension: str | None) -> Category:
        return self._table.lookup(extension)

    def category_dir(self, category: Category) -> Path:
        return self._destination / category.value

    def ensure_writable(self, target: Path) -> None:
        """Verify ``target`` is a legal write location inside the destination.

        Raises:
            PolicyViolation: If ``target`` escapes the destination root or crosses
                an excluded name.
        """
        if target == self._destination or not target.is_relative_to(self._destination):
            raise PolicyViolation(f"Refusing to write outside {self._destination}: {target}")
        inner = target.relative_to(self._destination).parts
        if any(part in self._exclusions or part in ("..", "") for part in inner):
            raise PolicyViolation(f"Refusing to write into an excluded path: {target}")


__all__ = ["PathPolicy"]
