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

import os
import stat
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from ...domain.errors import PathNotFound, PathNotReadable
from ...domain.models import FileRecord
from ...ports.filesystem import FilesystemPort, WalkErrorHandler


def _creation_ns(st: os.stat_result) -> int:
    # st_birthtime is real creation time (Windows, macOS, BSD); Linux only has
    # st_ctime, which is the inode change time.
    birth_ns = getattr(st, "st_birthtime_ns", None)
    if birth_ns is not None:
        return int(birth_ns)
    birth = getattr(st, "st_birthtime", None)
    if birth is not None:
        return int(birth * 1e9)
    return int(st.st_ctime_ns)


class LocalFS(FilesystemPort):
    """
    Local filesystem adapter.

    Symlinks are never followed, so a link cycle cannot trap the walk.
    Directory entries are visited in sorted order to keep scans reproducible.
    """

    def check_root(self, root: Path) -> None:
        root = Path(root)
        if not os.path.lexists(root):
            raise PathNotFound(root)
        if root.is_dir():
            try:
                with os.scandir(root):
                    pass
            except OSError as e:
                raise PathNotReadable(root, e) from e
        elif not os.access(root, os.R_OK):
            raise PathNotReadable(root)

    def walk(
        self, root: Path, on_error: Optional[WalkErrorHandler] = None
    ) -> Iterator[Path]:
        root = Path(root)
        if root.is_file() and not root.is_symlink():
            yield root
            return

        stack = [root]
        while stack:
            current = stack.pop()
            try:
                with os.scandir(current) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                if on_error is not None:
                    on_error(current, e)
                continue

            subdirs = []
            for entry in entries:
                try:
                    if entry.is_symlink():
                        continue
                    if entry.is_dir(follow_symlinks=False):
                        subdirs.append(Path(entry.path))
                    elif entry.is_file(follow_symlinks=False):
                        yield Path(entry.path)
                except OSError as e:
                    if on_error is not None:
                        on_error(Path(entry.path), e)
            stack.extend(reversed(subdirs))

    def stat(self, path: Path) -> FileRecord:
        st = os.stat(path, follow_symlinks=False)
        if not stat.S_ISREG(st.st_mode):
            raise OSError(f"not a regular file: {path}")
        return FileRecord(
            path=str(Path(path).absolute()),
            size=int(st.st_size),
            mtime_ns=int(st.st_mtime_ns),
            atime_ns=int(st.st_atime_ns),
            ctime_ns=_creation_ns(st),
            extension=Path(path).suffix.lower(),
        )

    def open_bytes(self, path: Path) -> BinaryIO:
        return open(path, "rb")
