"""Media Core — key expansion, fetch, verify and decrypt.

Security Note (Threat Model):
    Media keys and decrypted bytes live in process memory for the duration
    of one request. Key sets are zeroized on every exit path, but copies
    made by the interpreter or the crypto backend cannot be wiped. This is
    an accepted limitation.
"""

from .categories import MediaCategory, get_content_type, get_file_extension
from .config import FetchConfig, ReaperConfig, MediaConfig
from .keys import ExpandedKeySet, expand, expand_media_key, expanded_keys, wipe
from .crypto import decrypt_payload, encrypt_payload
from .fetcher import MediaFetcher, fetch_media, validate_url
from .models import MediaReference, DecryptedArtifact
from .pipeline import decrypt_from_url, decrypt_media
from .reaper import TempFileReaper

__all__ = [
    "MediaCategory",
    "get_content_type",
    "get_file_extension",
    "FetchConfig",
    "ReaperConfig",
    "MediaConfig",
    "ExpandedKeySet",
    "expand",
    "expand_media_key",
    "expanded_keys",
    "wipe",
    "decrypt_payload",
    "encrypt_payload",
    "MediaFetcher",
    "fetch_media",
    "validate_url",
    "MediaReference",
    "DecryptedArtifact",
    "decrypt_from_url",
    "decrypt_media",
    "TempFileReaper",
]
