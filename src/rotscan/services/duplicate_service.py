# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import logging
import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple

from ..domain.config import DEFAULT_WORKERS, coerce_workers
from ..domain.errors import ClassificationCancelled, HashComputationError
from ..domain.models import FileIndex, FileRecord, RedundantMember, RedundantSet
from ..ports.filesystem import FilesystemPort
from ..ports.hasher import HasherPort

logger = logging.getLogger(__name__)

# (record, digest, error); digest is None when the file was skipped or failed.
_HashOutcome = Tuple[FileRecord, Optional[str], Optional[HashComputationError]]


@dataclass(frozen=True)
class DuplicateScan:
    """Result of one duplicate pass: the qualifying sets and the files that failed to hash."""

    sets: Tuple[RedundantSet, ...] = ()
    errors: Tuple[HashComputationError, ...] = ()


class DuplicateService:
    """
    Produces exact-duplicate sets from a FileIndex.

    Files are bucketed by size first; only buckets with two or more members are
    hashed. Hashing runs on a bounded thread pool and results are merged after
    the pool drains, in index order, so output is identical across runs.

    All per-run state lives inside `scan`, so one instance may serve several
    runs at once.
    """

    def __init__(
        self,
        fs: FilesystemPort,
        hasher: HasherPort,
        *,
        workers: int = DEFAULT_WORKERS,
    ) -> None:
        self._fs = fs
        self._hasher = hasher
        self._workers = coerce_workers(workers)
        self._lock = threading.Lock()
        self._active: Set[threading.Event] = set()

    @property
    def workers(self) -> int:
        return self._workers

    def cancel(self) -> None:
        """
        Stop every run in progress before its next file is opened.

        A run that loses files this way raises ClassificationCancelled rather
        than returning partial sets. Runs started afterwards are unaffected.
        """
        with self._lock:
            for stop in self._active:
                stop.set()

    def classify(self, index: FileIndex) -> Iterator[RedundantSet]:
        """
        Yield RedundantSet entries ordered by ascending size, then by the index
        position of each set's first member.
        """
        return iter(self.scan(index).sets)

    def scan(self, index: FileIndex) -> DuplicateScan:
        """
        Run one duplicate pass and return the sets together with hash failures.

        Raises:
            ClassificationCancelled: if cancel() left candidate files unhashed.
        """
        candidates = self._size_candidates(index)
        if not candidates:
            return DuplicateScan()

        stop = threading.Event()
        with self._lock:
            self._active.add(stop)
        try:
            outcomes = self._hash_all(candidates, stop)
        finally:
            with self._lock:
                self._active.discard(stop)

        errors: List[HashComputationError] = []
        skipped = 0
        # (size, digest) -> members in index order
        groups: Dict[Tuple[int, str], List[RedundantMember]] = defaultdict(list)
        for record, digest, error in outcomes:
            if error is not None:
                errors.append(error)
            elif digest is None:
                skipped += 1
            else:
                groups[(record.size, digest)].append(RedundantMember(record.path, digest))

        if skipped:
            logger.warning("DuplicateService: cancelled, %d files not hashed", skipped)
            raise ClassificationCancelled(skipped)

        position = {r.path: i for i, r in enumerate(index.records)}
        qualifying = [
            (size, digest, members)
            for (size, digest), members in groups.items()
            if len(members) > 1
        ]
        qualifying.sort(key=lambda g: (g[0], position[g[2][0].path]))

        sets = tuple(
            RedundantSet(group_id=group_id, size=size, digest=digest, members=tuple(members))
            for group_id, (size, digest, members) in enumerate(qualifying, start=1)
        )
        return DuplicateScan(sets=sets, errors=tuple(errors))

    # --- helpers ------------------------------------------------------------

    @staticmethod
    def _size_candidates(index: FileIndex) -> List[FileRecord]:
        """Records that share their byte length with at least one other record."""
        by_size: Dict[int, List[FileRecord]] = defaultdict(list)
        for rec in index.records:
            by_size[rec.size].append(rec)
        keep = {size for size, bucket in by_size.items() if len(bucket) > 1}
        candidates = [rec for rec in index.records if rec.size in keep]
        logger.debug(
            "DuplicateService: %d of %d files share a size (%d buckets)",
            len(candidates),
            len(index.records),
            len(keep),
        )
        return candidates

    def _hash_all(
        self, candidates: List[FileRecord], stop: threading.Event
    ) -> List[_HashOutcome]:
        ex = ThreadPoolExecutor(max_workers=self._workers)
        try:
            # map() yields in submission order regardless of completion order.
            outcomes = list(ex.map(lambda rec: self._hash_one(rec, stop), candidates))
        except KeyboardInterrupt:
            stop.set()
            ex.shutdown(wait=True, cancel_futures=True)
            raise
        ex.shutdown(wait=True)
        return outcomes

    def _hash_one(self, record: FileRecord, stop: threading.Event) -> _HashOutcome:
        if stop.is_set():
            return record, None, None
        try:
            with self._fs.open_bytes(Path(record.path)) as fh:
                digest = self._hasher.hash_stream(fh)
        except OSError as e:
            logger.warning("DuplicateService: hashing failed for %s: %s", record.path, e)
            return record, None, HashComputationError(record.path, e)
        return record, digest, None
