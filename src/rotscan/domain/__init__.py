from .errors import (
    ClassificationCancelled,
    ConfigurationError,
    EmptyIndex,
    FilesystemError,
    HashComputationError,
    HashingError,
    InvalidConfiguration,
    PathNotFound,
    PathNotReadable,
    RotError,
    TraversalEntryError,
)
from .models import (
    FileIndex,
    FileRecord,
    ObsoleteEntry,
    RedundantMember,
    RedundantSet,
    RotResult,
    TimestampKind,
    TrivialEntry,
)
from .config import DEFAULT_TRIVIAL_EXTENSIONS, DEFAULT_YEARS, RotConfig

__all__ = [
    "ClassificationCancelled",
    "ConfigurationError",
    "EmptyIndex",
    "FilesystemError",
    "HashComputationError",
    "HashingError",
    "InvalidConfiguration",
    "PathNotFound",
    "PathNotReadable",
    "RotError",
    "TraversalEntryError",
    "FileIndex",
    "FileRecord",
    "ObsoleteEntry",
    "RedundantMember",
    "RedundantSet",
    "RotResult",
    "TimestampKind",
    "TrivialEntry",
    "DEFAULT_TRIVIAL_EXTENSIONS",
    "DEFAULT_YEARS",
    "RotConfig",
]
