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
from datetime import MINYEAR, datetime, timezone
from typing import Any, Callable, Iterator, Optional

from ..domain.config import DEFAULT_YEARS, coerce_timestamp_kind, coerce_years
from ..domain.models import FileIndex, ObsoleteEntry, TimestampKind, datetime_to_ns

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def years_before(moment: datetime, years: int) -> datetime:
    """
    Same calendar moment `years` earlier; Feb 29 becomes Feb 28 when needed.

    Thresholds reaching past year 1 clamp to datetime.min, which no file predates.
    """
    if moment.year - years < MINYEAR:
        return datetime.min.replace(tzinfo=moment.tzinfo)
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)


class AgeService:
    """
    Flags files whose selected timestamp is strictly older than now - N years.
    """

    def __init__(
        self,
        years: Any = DEFAULT_YEARS,
        kind: Any = TimestampKind.MODIFIED,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.years = coerce_years(years)
        self.kind = coerce_timestamp_kind(kind)
        self._clock = clock or _utcnow

    def cutoff(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return years_before(now, self.years)

    def classify(self, index: FileIndex) -> Iterator[ObsoleteEntry]:
        # One cutoff for the whole pass.
        cutoff = self.cutoff()
        cutoff_ns = datetime_to_ns(cutoff)
        logger.debug(
            "AgeService: %s before %s (%d years)",
            self.kind.label,
            cutoff.isoformat(),
            self.years,
        )
        for rec in index.records:
            ts = rec.timestamp_ns(self.kind)
            if ts < cutoff_ns:
                yield ObsoleteEntry(path=rec.path, kind=self.kind, timestamp_ns=ts)
