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

import fnmatch
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..domain.errors import EmptyIndex, TraversalEntryError
from ..domain.models import FileIndex, FileRecord
from ..ports.filesystem import FilesystemPort

logger = logging.getLogger(__name__)


class IndexService:
    """
    Builds the FileIndex for one run:
      - validates the root (missing / unreadable roots are fatal)
      - walks the tree without following symlinks
      - stats each regular file into an immutable FileRecord
      - collects per-entry failures instead of aborting

    Raises EmptyIndex when nothing was indexed, so callers can stop before
    classifying.
    """

    def __init__(
        self,
        fs: FilesystemPort,
        *,
        ignore_patterns: Optional[Iterable[str]] = None,
    ) -> None:
        self._fs = fs
        self._ignore_patterns = tuple(ignore_patterns or ())

    def _ignored(self, path: Path) -> bool:
        name = str(path)
        for pat in self._ignore_patterns:
            if fnmatch.fnmatch(name, pat):
                return True
        return False

    def build(self, root: Union[str, Path]) -> FileIndex:
        root = Path(root)
        self._fs.check_root(root)

        records: List[FileRecord] = []
        errors: List[TraversalEntryError] = []

        def on_error(path: Path, exc: OSError) -> None:
            logger.warning("IndexService.build: cannot list %s: %s", path, exc)
            errors.append(TraversalEntryError(path, exc))

        for path in self._fs.walk(root, on_error=on_error):
            if self._ignored(path):
                logger.debug("IndexService.build: ignoring %s", path)
                continue
            try:
                records.append(self._fs.stat(path))
            except OSError as e:
                logger.warning("IndexService.build: stat failed for %s: %s", path, e)
                errors.append(TraversalEntryError(path, e))

        if not records:
            raise EmptyIndex(root, errors)

        logger.info(
            "Indexed %d files under %s (%d entries skipped)",
            len(records),
            root,
            len(errors),
        )
        return FileIndex(root=str(root), records=tuple(records), errors=tuple(errors))
