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

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Tuple

from .errors import InvalidConfiguration
from .models import TimestampKind

logger = logging.getLogger(__name__)

DEFAULT_YEARS = 7
DEFAULT_WORKERS = 4
MAX_WORKERS = 8
DEFAULT_TRIVIAL_EXTENSIONS: Tuple[str, ...] = (
    ".tmp",
    ".temp",
    ".url",
    ".lnk",
    ".log",
    ".trace",
    ".debug",
    ".cache",
    ".bak",
    ".backup",
    ".old",
)


def normalize_extension(value: str) -> str:
    """'LOG', '.log' and ' .Log ' all become '.log'; blank input becomes ''."""
    ext = (value or "").strip().lower()
    if not ext:
        return ""
    return ext if ext.startswith(".") else f".{ext}"


def normalize_extensions(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """Normalise, drop blanks and de-duplicate while keeping first-seen order."""
    if values is None:
        return DEFAULT_TRIVIAL_EXTENSIONS
    seen: dict[str, None] = {}
    for v in values:
        ext = normalize_extension(v)
        if ext:
            seen.setdefault(ext, None)
    return tuple(seen)


def parse_years(value: Any) -> int:
    """
    Strictly parse an age threshold.

    Raises:
        InvalidConfiguration: if the value is missing, not an integer, or negative.
    """
    if value is None or isinstance(value, bool):
        raise InvalidConfiguration(f"age threshold must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidConfiguration(f"age threshold must be whole years, got {value!r}")
        value = int(value)
    try:
        years = int(str(value).strip())
    except ValueError as e:
        raise InvalidConfiguration(f"age threshold must be an integer, got {value!r}") from e
    if years < 0:
        raise InvalidConfiguration(f"age threshold must be >= 0, got {years}")
    return years


def coerce_years(value: Any, default: int = DEFAULT_YEARS) -> int:
    """Lenient form of parse_years: invalid input logs a warning and returns `default`."""
    try:
        return parse_years(value)
    except InvalidConfiguration as e:
        logger.warning("%s; using default of %d years", e, default)
        return default


def coerce_timestamp_kind(
    value: Any, default: TimestampKind = TimestampKind.MODIFIED
) -> TimestampKind:
    if isinstance(value, TimestampKind):
        return value
    try:
        return TimestampKind(str(value).strip().lower())
    except ValueError:
        logger.warning(
            "Unknown timestamp kind %r; using %s", value, default.value
        )
        return default


def coerce_workers(value: Any, default: int = DEFAULT_WORKERS) -> int:
    """Clamp the hashing pool size to 1..MAX_WORKERS."""
    try:
        workers = int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid worker count %r; using %d", value, default)
        return default
    return max(1, min(MAX_WORKERS, workers))


@dataclass(frozen=True)
class RotConfig:
    """Explicit per-run configuration handed to the core by its caller."""

    years: int = DEFAULT_YEARS
    timestamp_kind: TimestampKind = TimestampKind.MODIFIED
    trivial_extensions: Tuple[str, ...] = DEFAULT_TRIVIAL_EXTENSIONS
    workers: int = DEFAULT_WORKERS
    ignore_patterns: Tuple[str, ...] = field(default=())

    @classmethod
    def from_values(
        cls,
        *,
        years: Any = DEFAULT_YEARS,
        timestamp_kind: Any = TimestampKind.MODIFIED,
        trivial_extensions: Optional[Iterable[str]] = None,
        workers: Any = DEFAULT_WORKERS,
        ignore_patterns: Optional[Iterable[str]] = None,
    ) -> RotConfig:
        """Build a config from loosely-typed input, falling back to defaults."""
        return cls(
            years=coerce_years(years),
            timestamp_kind=coerce_timestamp_kind(timestamp_kind),
            trivial_extensions=normalize_extensions(trivial_extensions),
            workers=coerce_workers(workers),
            ignore_patterns=tuple(ignore_patterns or ()),
        )
