"""
Media key expansion and zeroization.

A 32-byte media key is stretched with HKDF-SHA256 (zero salt, category
context string) into 112 bytes, then split:

    [0, 32)    cipher key  (AES-256)
    [32, 64)   MAC key     (HMAC-SHA256)
    [64, 80)   IV          (AES-CBC)
    [80, 112)  reserved

Security Note:
    Key parts are held in ``bytearray`` so they can be overwritten in place.
    Intermediate ``bytes`` produced by the HKDF backend cannot be wiped;
    zeroization is best-effort within the limits of the interpreter.
"""
import base64
import binascii
import logging
from contextlib import contextmanager
from typing import Iterator, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..exceptions import ValidationError
from .categories import MediaCategory

logger = logging.getLogger("navigator.media")

MEDIA_KEY_LENGTH = 32
EXPANDED_KEY_LENGTH = 112

CIPHER_KEY_SLICE = slice(0, 32)
MAC_KEY_SLICE = slice(32, 64)
IV_SLICE = slice(64, 80)
RESERVED_SLICE = slice(80, 112)

_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


class ExpandedKeySet:
    """Key material for a single decrypt operation.

    Usable as a context manager; leaving the block wipes every part.
    """

    __slots__ = ("cipher_key", "mac_key", "iv", "reserved_tail", "_wiped")

    def __init__(
        self,
        cipher_key: bytearray,
        mac_key: bytearray,
        iv: bytearray,
        reserved_tail: bytearray,
    ):
        self.cipher_key = cipher_key
        self.mac_key = mac_key
        self.iv = iv
        self.reserved_tail = reserved_tail
        self._wiped = False

    @classmethod
    def from_expanded(cls, expanded: bytes) -> "ExpandedKeySet":
        if len(expanded) != EXPANDED_KEY_LENGTH:
            raise ValueError(
                f"expanded key must be {EXPANDED_KEY_LENGTH} bytes, "
                f"got {len(expanded)}"
            )
        return cls(
            cipher_key=bytearray(expanded[CIPHER_KEY_SLICE]),
            mac_key=bytearray(expanded[MAC_KEY_SLICE]),
            iv=bytearray(expanded[IV_SLICE]),
            reserved_tail=bytearray(expanded[RESERVED_SLICE]),
        )

    @property
    def wiped(self) -> bool:
        return self._wiped

    def wipe(self) -> None:
        """Overwrite every key part with zeros. Calling it twice is a no-op."""
        if self._wiped:
            return
        for buf in (self.cipher_key, self.mac_key, self.iv, self.reserved_tail):
            buf[:] = bytes(len(buf))
        self._wiped = True

    def __enter__(self) -> "ExpandedKeySet":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        # never render key bytes
        state = "wiped" if self._wiped else "live"
        return f"<ExpandedKeySet [{state}]>"


def wipe(keys: ExpandedKeySet) -> None:
    """Zeroize ``keys`` in place. Safe to call on an already wiped set."""
    keys.wipe()


def decode_media_key(secret_b64: str) -> bytes:
    """Decode a base64 media key and check it is exactly 32 bytes.

    Standard and URL-safe alphabets are accepted, with or without padding.

    Raises:
        ValidationError: If the value is not base64 or has the wrong length.
    """
    if not isinstance(secret_b64, str):
        raise ValidationError("Media key must be a base64 string", field="mediaKey")
    normalized = secret_b64.strip().rstrip("=").translate(_URLSAFE_TO_STANDARD)
    normalized += "=" * (-len(normalized) % 4)
    try:
        media_key = base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as err:
        logger.debug("Media key rejected: not base64")
        raise ValidationError(
            "Media key is not valid base64", field="mediaKey"
        ) from err
    if len(media_key) != MEDIA_KEY_LENGTH:
        logger.debug("Media key rejected: %d bytes", len(media_key))
        raise ValidationError(
            f"Invalid media key length: {len(media_key)}, "
            f"expected {MEDIA_KEY_LENGTH} bytes",
            field="mediaKey",
        )
    return media_key


def expand_media_key(
    secret_b64: str, category: Union[MediaCategory, str]
) -> ExpandedKeySet:
    """Derive the key set for ``category`` from a base64 media key.

    Deterministic: the same inputs always give byte-identical output.

    Args:
        secret_b64: Base64-encoded 32-byte media key.
        category: One of image, video, audio, document.

    Returns:
        A live ``ExpandedKeySet``; the caller owns it and must wipe it.

    Raises:
        ValidationError: On a malformed key or unknown category.
    """
    media_key = decode_media_key(secret_b64)
    media_category = MediaCategory.parse(category)
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=EXPANDED_KEY_LENGTH,
        salt=None,  # RFC 5869: zero-filled salt of hash length
        info=media_category.info,
    )
    return ExpandedKeySet.from_expanded(hkdf.derive(media_key))


# public name used by the service layer
expand = expand_media_key


@contextmanager
def expanded_keys(
    secret_b64: str, category: Union[MediaCategory, str]
) -> Iterator[ExpandedKeySet]:
    """Expand a media key and wipe it when the block exits, however it exits."""
    keys = expand_media_key(secret_b64, category)
    try:
        yield keys
    finally:
        keys.wipe()
