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
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from ..domain.config import RotConfig
from ..domain.models import RotResult
from ..ports.filesystem import FilesystemPort
from ..ports.hasher import HasherPort
from .age_service import AgeService
from .duplicate_service import DuplicateService
from .extension_service import ExtensionService
from .index_service import IndexService

logger = logging.getLogger(__name__)


class RotService:
    """
    Runs one classification pass:
      - builds the FileIndex once
      - hands the same read-only index to the three classifiers
      - returns every category plus the collected diagnostics

    PathNotFound, PathNotReadable, EmptyIndex and ClassificationCancelled
    propagate to the caller.
    """

    def __init__(
        self,
        fs: FilesystemPort,
        hasher: HasherPort,
        config: Optional[RotConfig] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config or RotConfig()
        self.indexer = IndexService(fs, ignore_patterns=self.config.ignore_patterns)
        self.duplicates = DuplicateService(fs, hasher, workers=self.config.workers)
        self.ages = AgeService(
            self.config.years, self.config.timestamp_kind, clock=clock
        )
        self.extensions = ExtensionService(self.config.trivial_extensions)

    def run(self, root: Union[str, Path]) -> RotResult:
        index = self.indexer.build(root)

        duplicates = self.duplicates.scan(index)
        redundant = duplicates.sets
        obsolete = tuple(self.ages.classify(index))
        trivial = tuple(self.extensions.classify(index))

        logger.info(
            "Classified %d files: %d redundant sets, %d obsolete, %d trivial",
            len(index),
            len(redundant),
            len(obsolete),
            len(trivial),
        )
        return RotResult(
            index=index,
            redundant=redundant,
            obsolete=obsolete,
            trivial=trivial,
            hash_errors=duplicates.errors,
        )
