"""Tests for exclusion and destination safety rules."""

from pathlib import Path

import pytest

from tidytree.classification import Category, ClassificationTable
from tidytree.errors import PolicyViolation
from tidytree.ingestion import PathPolicy

ROOT = Path("/data/root")
DEST = Path("/data/Sorted")


def _policy(*tokens: str) -> PathPolicy:
    return PathPolicy(ROOT, DEST, tokens)


def test_destination_name_is_always_excluded() -> None:
    policy = _policy(".git")

    assert policy.exclusions == frozenset({".git", "Sorted"})
    assert policy.is_excluded(ROOT / "Sorted" / "a.txt")


def test_tokens_match_whole_components_only() -> None:
    policy = _policy("node_modules")

    assert policy.is_excluded(ROOT / "web" / "node_modules" / "x.js")
    assert not policy.is_excluded(ROOT / "web" / "node_modules_backup" / "x.js")
    assert not policy.is_excluded(ROOT / "node_modules.txt")


def test_components_above_root_do_not_count() -> None:
    policy = PathPolicy(Path("/home/.git/work"), Path("/home/.git/Sorted"), [".git"])

    assert not policy.is_excluded(Path("/home/.git/work/notes.md"))
    assert policy.is_excluded(Path("/home/.git/work/.git/HEAD"))


def test_anything_inside_destination_is_excluded() -> None:
    policy = _policy()

    assert policy.is_excluded(DEST)
    assert policy.is_excluded(DEST / "Docs" / "a.pdf")


def test_classify_and_category_dir_use_table() -> None:
    policy = PathPolicy(ROOT, DEST, (), ClassificationTable({".log": "Docs"}))

    assert policy.classify(".log") is Category.DOCS
    assert policy.category_dir(Category.DOCS) == DEST / "Docs"


def test_ensure_writable_accepts_category_targets() -> None:
    _policy().ensure_writable(DEST / "Images" / "cat.png")


@pytest.mark.parametrize(
    "target",
    [
        DEST,
        Path("/data/root/cat.png"),
        Path("/data/Sorted2/cat.png"),
        DEST / ".git" / "cat.png",
    ],
)
def test_ensure_writable_rejects_escapes(target: Path) -> None:
    with pytest.raises(PolicyViolation):
        _policy(".git").ensure_writable(target)
