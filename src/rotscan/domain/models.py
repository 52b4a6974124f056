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

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Iterator, Tuple

from .errors import HashComputationError, TraversalEntryError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TimestampKind(str, Enum):
    """Which timestamp the age classifier compares against the cutoff."""

    MODIFIED = "modified"
    ACCESSED = "accessed"
    CREATED = "created"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    TimestampKind.MODIFIED: "LastModified",
    TimestampKind.ACCESSED: "LastAccessed",
    TimestampKind.CREATED: "Created",
}


def ns_to_datetime(value_ns: int) -> datetime:
    """Convert epoch nanoseconds to an aware UTC datetime (microsecond precision)."""
    return _EPOCH + timedelta(microseconds=value_ns // 1000)


def datetime_to_ns(value: datetime) -> int:
    """Convert a datetime to epoch nanoseconds; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1000


@dataclass(frozen=True)
class FileRecord:
    """Snapshot of one regular file taken at index time."""

    path: str
    size: int
    mtime_ns: int
    atime_ns: int
    ctime_ns: int
    extension: str = ""

    def timestamp_ns(self, kind: TimestampKind) -> int:
        if kind is TimestampKind.ACCESSED:
            return self.atime_ns
        if kind is TimestampKind.CREATED:
            return self.ctime_ns
        return self.mtime_ns


@dataclass(frozen=True)
class FileIndex:
    """
    Ordered, point-in-time collection of FileRecord built once per run.

    Records appear in traversal order. Entries that could not be read are not
    in `records`; their failures are kept in `errors`.
    """

    root: str
    records: Tuple[FileRecord, ...] = ()
    errors: Tuple[TraversalEntryError, ...] = ()

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class RedundantMember:
    path: str
    digest: str


@dataclass(frozen=True)
class RedundantSet:
    """Two or more files with identical size and content digest."""

    group_id: int
    size: int
    digest: str
    members: Tuple[RedundantMember, ...]

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(m.path for m in self.members)

    @property
    def wasted_bytes(self) -> int:
        """Bytes that would be reclaimed by keeping a single copy."""
        return self.size * (len(self.members) - 1)


@dataclass(frozen=True)
class ObsoleteEntry:
    path: str
    kind: TimestampKind
    timestamp_ns: int

    @property
    def label(self) -> str:
        return self.kind.label

    @property
    def timestamp(self) -> datetime:
        return ns_to_datetime(self.timestamp_ns)


@dataclass(frozen=True)
class TrivialEntry:
    path: str
    extension: str


@dataclass(frozen=True)
class RotResult:
    """Everything one run produced: the shared index, three categories, diagnostics."""

    index: FileIndex
    redundant: Tuple[RedundantSet, ...] = ()
    obsolete: Tuple[ObsoleteEntry, ...] = ()
    trivial: Tuple[TrivialEntry, ...] = ()
    hash_errors: Tuple[HashComputationError, ...] = field(default=())

    @property
    def diagnostics(self) -> Tuple[Exception, ...]:
        return tuple(self.index.errors) + tuple(self.hash_errors)

    @property
    def root(self) -> Path:
        return Path(self.index.root)
