# Licensed under the Apache License, Version 2.0
import hashlib
from typing import BinaryIO

from ...ports.hasher import HasherPort


class SHA256Hasher(HasherPort):
    """Cryptographic strong hash (full-file SHA-256)."""

    def __init__(self, chunk_size: int = 1 << 20) -> None:  # 1 MiB reads
        self._chunk_size = int(chunk_size)

    @property
    def name(self) -> str:
        return "sha256"

    def hash_stream(self, stream: BinaryIO) -> str:
        h = hashlib.sha256()
        while True:
            chunk = stream.read(self._chunk_size)
            if not chunk:
                break
            h.update(chunk)
        return h.hexdigest()
