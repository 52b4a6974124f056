import os
from pathlib import Path
from typing import Iterator, Optional

import pytest

from rotscan.adapters.filesystem.local_fs import LocalFS
from rotscan.domain.errors import (
    EmptyIndex,
    PathNotFound,
    PathNotReadable,
    TraversalEntryError,
)
from rotscan.domain.models import FileRecord
from rotscan.ports.filesystem import WalkErrorHandler
from rotscan.services.index_service import IndexService


class FSWithBadStat(LocalFS):
    def walk(
        self, root: Path, on_error: Optional[WalkErrorHandler] = None
    ) -> Iterator[Path]:
        yield root / "ok.txt"
        yield root / "bad.txt"
        if on_error is not None:
            on_error(root / "locked", PermissionError("permission denied"))

    def stat(self, path: Path) -> FileRecord:
        if path.name == "bad.txt":
            # simulate unreadable file
            raise OSError("permission denied")
        return super().stat(path)


def test_entry_errors_are_collected_not_fatal(tmp_path: Path):
    (tmp_path / "ok.txt").write_text("hello")
    (tmp_path / "bad.txt").write_text("secret")

    index = IndexService(FSWithBadStat()).build(tmp_path)

    assert [Path(r.path).name for r in index] == ["ok.txt"]
    assert len(index.errors) == 2
    assert all(isinstance(e, TraversalEntryError) for e in index.errors)
    assert {Path(e.path).name for e in index.errors} == {"bad.txt", "locked"}


def test_missing_root_fails_before_walking(tmp_path: Path):
    class NoWalkFS(LocalFS):
        def walk(self, root, on_error=None):
            raise AssertionError("walk must not be called")

    with pytest.raises(PathNotFound):
        IndexService(NoWalkFS()).build(tmp_path / "nope")


def test_unlistable_root_fails_before_walking(tmp_path: Path, monkeypatch):
    class NoWalkFS(LocalFS):
        def walk(self, root, on_error=None):
            raise AssertionError("walk must not be called")

    real_scandir = os.scandir

    def locked_scandir(path="."):
        if Path(path) == tmp_path:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", locked_scandir)

    with pytest.raises(PathNotReadable) as info:
        IndexService(NoWalkFS()).build(tmp_path)
    assert isinstance(info.value.cause, PermissionError)


def test_empty_root_is_distinguished(tmp_path: Path):
    (tmp_path / "sub").mkdir()
    with pytest.raises(EmptyIndex) as info:
        IndexService(LocalFS()).build(tmp_path)
    assert info.value.root == str(tmp_path)


def test_ignore_patterns(tmp_path: Path):
    (tmp_path / "ignore_me.txt").write_text("ignored\n")
    (tmp_path / "include_me.txt").write_text("included\n")

    index = IndexService(LocalFS(), ignore_patterns=["*ignore_me.txt"]).build(tmp_path)

    assert [Path(r.path).name for r in index] == ["include_me.txt"]


def test_everything_ignored_is_empty(tmp_path: Path):
    (tmp_path / "a.txt").write_text("a")
    with pytest.raises(EmptyIndex):
        IndexService(LocalFS(), ignore_patterns=["*.txt"]).build(tmp_path)
