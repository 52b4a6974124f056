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

from pathlib import Path
from typing import Sequence, Union


class RotError(Exception):
    """Base exception for domain-specific errors."""


class FilesystemError(RotError):
    """Unreadable paths, permission issues, long paths, etc."""

    def __init__(self, path: Union[str, Path], message: str = "") -> None:
        self.path = str(path)
        super().__init__(message or self.path)


class PathNotFound(FilesystemError):
    """The scan root does not exist."""

    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__(path, f"Path not found: {path}")


class PathNotReadable(FilesystemError):
    """The scan root exists but cannot be listed."""

    def __init__(self, path: Union[str, Path], cause: Exception | None = None) -> None:
        self.cause = cause
        detail = f" ({cause})" if cause else ""
        super().__init__(path, f"Path not readable: {path}{detail}")


class TraversalEntryError(FilesystemError):
    """
    A single entry could not be enumerated or stat'ed.

    Collected on the FileIndex; never raised out of a scan.
    """

    def __init__(self, path: Union[str, Path], cause: Exception) -> None:
        self.cause = cause
        super().__init__(path, f"{path}: {cause}")


class HashingError(RotError):
    """Problems while computing content hashes."""


class HashComputationError(HashingError):
    """A file could not be hashed; it is left out of duplicate detection only."""

    def __init__(self, path: Union[str, Path], cause: Exception) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"{path}: {cause}")


class ClassificationCancelled(RotError):
    """A run was cancelled before every candidate file was hashed."""

    def __init__(self, skipped: int) -> None:
        self.skipped = skipped
        super().__init__(f"Cancelled with {skipped} files left unhashed")


class EmptyIndex(RotError):
    """The scan found no regular files, so there is nothing to classify."""

    def __init__(
        self, root: Union[str, Path], errors: Sequence[TraversalEntryError] = ()
    ) -> None:
        self.root = str(root)
        self.errors = tuple(errors)
        super().__init__(f"No files found under {root}")


class ConfigurationError(RotError):
    """Bad CLI args or unusable config."""


class InvalidConfiguration(ConfigurationError):
    """A configuration value could not be parsed; callers fall back to a default."""
