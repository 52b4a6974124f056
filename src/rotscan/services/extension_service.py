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

from typing import Iterable, Iterator, Optional, Tuple

from ..domain.config import normalize_extensions
from ..domain.models import FileIndex, TrivialEntry


class ExtensionService:
    """Flags files whose extension is on the trivial-file denylist."""

    def __init__(self, extensions: Optional[Iterable[str]] = None) -> None:
        self._extensions: Tuple[str, ...] = normalize_extensions(extensions)
        self._lookup = frozenset(self._extensions)

    @property
    def extensions(self) -> Tuple[str, ...]:
        return self._extensions

    def classify(self, index: FileIndex) -> Iterator[TrivialEntry]:
        for rec in index.records:
            # Extensionless files have "" which is never in the lookup.
            if rec.extension in self._lookup:
                yield TrivialEntry(path=rec.path, extension=rec.extension)
