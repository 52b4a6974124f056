import threading
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Optional

import pytest

from rotscan.domain.errors import ClassificationCancelled, PathNotFound
from rotscan.domain.models import FileIndex, FileRecord
from rotscan.ports.filesystem import FilesystemPort, WalkErrorHandler
from rotscan.ports.hasher import HasherPort
from rotscan.services.duplicate_service import DuplicateService


class MemoryFS(FilesystemPort):
    """In-memory FS: open_bytes serves the stored blob and records what was opened."""

    def __init__(self, blobs: Dict[str, bytes]):
        self.blobs = blobs
        self.opened: List[str] = []

    def check_root(self, root: Path) -> None:
        raise PathNotFound(root)

    def walk(
        self, root: Path, on_error: Optional[WalkErrorHandler] = None
    ) -> Iterator[Path]:
        return iter(())

    def stat(self, path: Path) -> FileRecord:
        raise OSError("not used")

    def open_bytes(self, path: Path) -> BinaryIO:
        key = str(path)
        self.opened.append(key)
        if key not in self.blobs:
            raise FileNotFoundError(key)
        return BytesIO(self.blobs[key])


class LabelHasher(HasherPort):
    """The 'digest' is the blob itself, so tests can name hashes directly."""

    @property
    def name(self) -> str:
        return "label"

    def hash_stream(self, stream) -> str:
        return stream.read().decode()


def rec(path: str, size: int) -> FileRecord:
    return FileRecord(path=path, size=size, mtime_ns=0, atime_ns=0, ctime_ns=0)


def test_size_bucket_then_hash_scenario():
    records = (rec("/A", 10), rec("/B", 10), rec("/C", 10), rec("/D", 20))
    fs = MemoryFS({"/A": b"H1", "/B": b"H1", "/C": b"H2", "/D": b"H1"})
    svc = DuplicateService(fs, LabelHasher())

    result = svc.scan(FileIndex(root="/", records=records))
    sets = result.sets

    assert len(sets) == 1
    assert sets[0].paths == ("/A", "/B")
    assert sets[0].digest == "H1"
    assert sets[0].size == 10
    assert sets[0].group_id == 1
    # D has a unique size and must never be read
    assert "/D" not in fs.opened
    assert result.errors == ()


def test_distinct_sizes_are_never_hashed():
    records = tuple(rec(f"/f{i}", i) for i in range(1, 6))
    fs = MemoryFS({f"/f{i}": b"same" for i in range(1, 6)})
    svc = DuplicateService(fs, LabelHasher())

    assert list(svc.classify(FileIndex(root="/", records=records))) == []
    assert fs.opened == []


def test_empty_index_yields_nothing():
    svc = DuplicateService(MemoryFS({}), LabelHasher())
    assert list(svc.classify(FileIndex(root="/"))) == []


def test_same_digest_in_different_buckets_is_not_merged():
    records = (rec("/a", 5), rec("/b", 5), rec("/c", 7), rec("/d", 7))
    fs = MemoryFS({"/a": b"X", "/b": b"X", "/c": b"X", "/d": b"X"})
    sets = list(DuplicateService(fs, LabelHasher()).classify(FileIndex("/", records)))

    assert [s.paths for s in sets] == [("/a", "/b"), ("/c", "/d")]
    assert [s.group_id for s in sets] == [1, 2]


def test_emission_order_is_size_then_first_seen():
    records = (
        rec("/big1", 30),
        rec("/z1", 10),
        rec("/y1", 10),
        rec("/big2", 30),
        rec("/z2", 10),
        rec("/y2", 10),
    )
    blobs = {"/big1": b"B", "/big2": b"B", "/z1": b"Z", "/z2": b"Z", "/y1": b"Y", "/y2": b"Y"}
    sets = list(
        DuplicateService(MemoryFS(blobs), LabelHasher(), workers=8).classify(
            FileIndex("/", records)
        )
    )

    assert [s.paths for s in sets] == [("/z1", "/z2"), ("/y1", "/y2"), ("/big1", "/big2")]


def test_hash_failure_drops_only_that_file():
    records = (rec("/a", 4), rec("/b", 4), rec("/gone", 4))
    fs = MemoryFS({"/a": b"same", "/b": b"same"})  # /gone vanished after indexing
    svc = DuplicateService(fs, LabelHasher())

    result = svc.scan(FileIndex("/", records))

    assert [s.paths for s in result.sets] == [("/a", "/b")]
    assert len(result.errors) == 1
    assert result.errors[0].path == "/gone"


def test_failures_do_not_create_false_groups():
    records = (rec("/a", 4), rec("/gone1", 4), rec("/gone2", 4))
    svc = DuplicateService(MemoryFS({"/a": b"aaaa"}), LabelHasher())

    result = svc.scan(FileIndex("/", records))
    assert result.sets == ()
    assert {e.path for e in result.errors} == {"/gone1", "/gone2"}


def test_workers_are_bounded():
    assert DuplicateService(MemoryFS({}), LabelHasher(), workers=100).workers == 8
    assert DuplicateService(MemoryFS({}), LabelHasher(), workers=0).workers == 1


def test_cancel_mid_run_raises_instead_of_partial_sets():
    records = tuple(rec(f"/f{i}", 4) for i in range(4))
    svc = None

    class CancellingFS(MemoryFS):
        def open_bytes(self, path: Path) -> BinaryIO:
            svc.cancel()  # cancelled while the first file is being read
            return super().open_bytes(path)

    fs = CancellingFS({f"/f{i}": b"same" for i in range(4)})
    svc = DuplicateService(fs, LabelHasher(), workers=1)

    with pytest.raises(ClassificationCancelled) as info:
        list(svc.classify(FileIndex("/", records)))

    assert info.value.skipped == 3
    assert fs.opened == ["/f0"]


def test_cancel_between_runs_does_not_affect_next_run():
    records = (rec("/a", 1), rec("/b", 1))
    svc = DuplicateService(MemoryFS({"/a": b"x", "/b": b"x"}), LabelHasher())
    svc.cancel()

    assert [s.paths for s in svc.classify(FileIndex("/", records))] == [("/a", "/b")]


def test_concurrent_runs_keep_their_own_errors():
    # Each run's first read waits for the other run, so both are in flight together.
    barrier = threading.Barrier(2, timeout=5)

    class RendezvousFS(MemoryFS):
        def open_bytes(self, path: Path) -> BinaryIO:
            if str(path) in ("/x0", "/y0"):
                barrier.wait()
            return super().open_bytes(path)

    fs = RendezvousFS({"/x0": b"x", "/x1": b"x", "/y0": b"y", "/y1": b"y"})
    svc = DuplicateService(fs, LabelHasher(), workers=1)
    left = FileIndex("/", (rec("/x0", 1), rec("/x1", 1), rec("/x-gone", 1)))
    right = FileIndex("/", (rec("/y0", 1), rec("/y1", 1)))

    with ThreadPoolExecutor(max_workers=2) as ex:
        f_left = ex.submit(svc.scan, left)
        f_right = ex.submit(svc.scan, right)
        got_left, got_right = f_left.result(), f_right.result()

    assert [s.paths for s in got_left.sets] == [("/x0", "/x1")]
    assert [e.path for e in got_left.errors] == ["/x-gone"]
    assert [s.paths for s in got_right.sets] == [("/y0", "/y1")]
    assert got_right.errors == ()
