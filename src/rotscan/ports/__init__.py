from .filesystem import FilesystemPort
from .hasher import HasherPort

__all__ = ["FilesystemPort", "HasherPort"]
