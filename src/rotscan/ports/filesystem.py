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

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional

from ..domain.models import FileRecord

WalkErrorHandler = Callable[[Path, OSError], None]


class FilesystemPort(ABC):
    """Abstract interface for filesystem access."""

    @abstractmethod
    def check_root(self, root: Path) -> None:
        """Raise PathNotFound / PathNotReadable if `root` cannot be scanned."""
        raise NotImplementedError

    @abstractmethod
    def walk(
        self, root: Path, on_error: Optional[WalkErrorHandler] = None
    ) -> Iterator[Path]:
        """
        Recursively yield regular file paths under the given root.

        Entries that cannot be listed are reported to `on_error` and skipped.
        """
        raise NotImplementedError

    @abstractmethod
    def stat(self, path: Path) -> FileRecord:
        """Return a FileRecord for `path`. Raises OSError when unreadable."""
        raise NotImplementedError

    @abstractmethod
    def open_bytes(self, path: Path) -> BinaryIO:
        """Open `path` for binary reading (caller closes)."""
        raise NotImplementedError
