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

import csv
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..domain.models import (
    ObsoleteEntry,
    RedundantSet,
    RotResult,
    TimestampKind,
    TrivialEntry,
)

logger = logging.getLogger(__name__)

REDUNDANT_REPORT = "Redundant.csv"
OBSOLETE_REPORT = "Obsolete.csv"
TRIVIAL_REPORT = "Trivial.csv"
REPORT_NAMES = (REDUNDANT_REPORT, OBSOLETE_REPORT, TRIVIAL_REPORT)


class ReportService:
    """
    Writes one flat CSV report per ROT category into `out_dir`.

    Notes:
      - Redundant: Path, Hash; rows of one set are adjacent.
      - Obsolete: Path, <LastModified|LastAccessed|Created> as ISO-8601 UTC.
      - Trivial: Path.
      - A category with no results gets no file at all.
      - Rows go to a temporary sibling that replaces the target only once
        complete, so a failed write never leaves a partial report.
    """

    def __init__(self, out_dir: str | Path) -> None:
        self._out_dir = Path(out_dir)

    def clear(self) -> List[Path]:
        """Remove reports left by a previous run. Returns the paths removed."""
        removed: List[Path] = []
        for name in REPORT_NAMES:
            target = self._out_dir / name
            if target.is_file():
                target.unlink()
                removed.append(target)
                logger.info("Removed stale report %s", target)
        return removed

    def write_redundant(self, sets: Iterable[RedundantSet]) -> Optional[Path]:
        rows = [
            {"Path": member.path, "Hash": member.digest}
            for group in sets
            for member in group.members
        ]
        return self._write(REDUNDANT_REPORT, ["Path", "Hash"], rows)

    def write_obsolete(self, entries: Iterable[ObsoleteEntry]) -> Optional[Path]:
        """
        The timestamp column is labelled by the kind the entries carry.

        Raises:
            ValueError: if the entries mix timestamp kinds.
        """
        entries = list(entries)
        kinds = {e.kind for e in entries}
        if len(kinds) > 1:
            raise ValueError(
                f"Obsolete entries mix timestamp kinds: {sorted(k.value for k in kinds)}"
            )
        label = entries[0].label if entries else TimestampKind.MODIFIED.label
        rows = [{"Path": e.path, label: e.timestamp.isoformat()} for e in entries]
        return self._write(OBSOLETE_REPORT, ["Path", label], rows)

    def write_trivial(self, entries: Iterable[TrivialEntry]) -> Optional[Path]:
        rows = [{"Path": e.path} for e in entries]
        return self._write(TRIVIAL_REPORT, ["Path"], rows)

    def write_all(self, result: RotResult) -> Dict[str, Optional[Path]]:
        return {
            "redundant": self.write_redundant(result.redundant),
            "obsolete": self.write_obsolete(result.obsolete),
            "trivial": self.write_trivial(result.trivial),
        }

    # --- helpers ------------------------------------------------------------

    def _write(
        self, name: str, fieldnames: Sequence[str], rows: List[Dict[str, Any]]
    ) -> Optional[Path]:
        if not rows:
            logger.info("No %s entries; %s not written", name[: -len(".csv")], name)
            return None

        self._out_dir.mkdir(parents=True, exist_ok=True)
        out = self._out_dir / name
        tmp = out.with_name(out.name + ".tmp")
        try:
            with open(tmp, "w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=list(fieldnames))
                writer.writeheader()
                writer.writerows(rows)
            os.replace(tmp, out)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        logger.info("Wrote %d rows to %s", len(rows), out)
        return out
