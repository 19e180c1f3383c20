"""Navigator Media.

Fetches encrypted media objects, verifies and decrypts them.
"""
from .version import __version__
from .exceptions import (
    MediaError,
    ValidationError,
    NetworkError,
    DecryptionError,
    InternalError,
)
from .media import (
    MediaCategory,
    MediaConfig,
    FetchConfig,
    ReaperConfig,
    MediaReference,
    DecryptedArtifact,
    expand,
    decrypt_from_url,
    decrypt_media,
    get_content_type,
    get_file_extension,
    TempFileReaper,
)

__all__ = [
    "__version__",
    "MediaError",
    "ValidationError",
    "NetworkError",
    "DecryptionError",
    "InternalError",
    "MediaCategory",
    "MediaConfig",
    "FetchConfig",
    "ReaperConfig",
    "MediaReference",
    "DecryptedArtifact",
    "expand",
    "decrypt_from_url",
    "decrypt_media",
    "get_content_type",
    "get_file_extension",
    "TempFileReaper",
]
