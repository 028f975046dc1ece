"""Tests for the filesystem implementations."""

import errno
import os
from pathlib import Path

import pytest

from tidytree.filesystem import InMemoryFileSystem, LocalFileSystem


def test_memory_listing_is_sorted_and_typed() -> None:
    fs = InMemoryFileSystem()
    fs.add_file("/root/b.txt", "b")
    fs.add_file("/root/a/inner.py", "print()")
    fs.add_dir("/root/empty")

    entries = fs.list_dir(Path("/root"))

    assert [(entry.name, entry.kind) for entry in entries] == [
        ("a", "dir"),
        ("b.txt", "file"),
        ("empty", "dir"),
    ]


def test_memory_move_never_overwrites() -> None:
    fs = InMemoryFileSystem()
    source = fs.add_file("/root/a.txt", "new")
    target = fs.add_file("/dest/a.txt", "old")

    with pytest.raises(FileExistsError):
        fs.move(source, target)

    assert fs.read_bytes(target) == b"old"
    assert fs.is_file(source)


def test_memory_remove_dir_requires_empty_directory() -> None:
    fs = InMemoryFileSystem()
    fs.add_file("/root/full/a.txt")
    fs.add_dir("/root/empty")

    with pytest.raises(OSError) as excinfo:
        fs.remove_dir(Path("/root/full"))
    assert excinfo.value.errno == errno.ENOTEMPTY

    fs.remove_dir(Path("/root/empty"))
    assert not fs.exists(Path("/root/empty"))


def test_memory_injected_failures_raise_until_cleared() -> None:
    fs = InMemoryFileSystem()
    path = fs.add_file("/root/a.txt", "data")
    fs.inject_failure(path, "stat")

    with pytest.raises(PermissionError):
        fs.stat_size(path)

    fs.clear_failures()
    assert fs.stat_size(path) == 4


def test_memory_resolve_normalizes_relative_paths() -> None:
    fs = InMemoryFileSystem()

    assert fs.resolve("data/../root/x") == Path("/root/x")


def test_local_listing_does_not_follow_symlinks(tmp_path: Path) -> None:
    (tmp_path / "file.txt").write_text("x", encoding="utf-8")
    (tmp_path / "dir").mkdir()
    (tmp_path / "link").symlink_to(tmp_path / "dir")

    kinds = {entry.name: entry.kind for entry in LocalFileSystem().list_dir(tmp_path)}

    assert kinds == {"file.txt": "file", "dir": "dir", "link": "other"}


def test_local_move_refuses_existing_destination(tmp_path: Path) -> None:
    source = tmp_path / "a.txt"
    target = tmp_path / "b.txt"
    source.write_text("new", encoding="utf-8")
    target.write_text("old", encoding="utf-8")

    with pytest.raises(FileExistsError):
        LocalFileSystem().move(source, target)

    assert target.read_text(encoding="utf-8") == "old"


def test_local_move_falls_back_to_copy_across_devices(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    source = tmp_path / "src" / "capture.pcap"
    source.parent.mkdir()
    source.write_bytes(b"\x00\x01packets")
    target_dir = tmp_path / "dest"
    target_dir.mkdir()
    target = target_dir / "capture.pcap"

    real_rename = os.rename

    def fake_rename(src: os.PathLike[str] | str, dst: os.PathLike[str] | str) -> None:
        if Path(src) == source:
            raise OSError(errno.EXDEV, "Invalid cross-device link")
        real_rename(src, dst)

    monkeypatch.setattr(os, "rename", fake_rename)

    LocalFileSystem().move(source, target)

    assert not source.exists()
    assert target.read_bytes() == b"\x00\x01packets"
    assert [path.name for path in target_dir.iterdir()] == ["capture.pcap"]


def test_local_read_chunks_and_size(tmp_path: Path) -> None:
    target = tmp_path / "blob.bin"
    target.write_bytes(b"abcdefg")
    fs = LocalFileSystem()

    assert list(fs.read_chunks(target, 3)) == [b"abc", b"def", b"g"]
    assert fs.stat_size(target) == 7
    assert fs.is_file(target)
    assert not fs.is_file(tmp_path)
