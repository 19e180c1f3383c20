"""
Media categories and their lookup tables.

A category drives three things: the HKDF context string used to expand
the media key, the response content type, and the suggested file
extension. Unknown categories are always a ``ValidationError``; no lookup
falls back to a generic binary type.
"""
from enum import Enum
from typing import Union

from ..exceptions import ValidationError


class MediaCategory(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"

    @classmethod
    def parse(cls, value: Union["MediaCategory", str]) -> "MediaCategory":
        """Return the category for ``value`` or raise ``ValidationError``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        raise ValidationError(
            f"Unsupported media type: {value!r}", field="mediaType"
        )

    @property
    def info(self) -> bytes:
        """HKDF context string (domain separation) for this category."""
        match self:
            case MediaCategory.IMAGE:
                return b"WhatsApp Image Keys"
            case MediaCategory.VIDEO:
                return b"WhatsApp Video Keys"
            case MediaCategory.AUDIO:
                return b"WhatsApp Audio Keys"
            case MediaCategory.DOCUMENT:
                return b"WhatsApp Document Keys"

    @property
    def content_type(self) -> str:
        match self:
            case MediaCategory.IMAGE:
                return "image/jpeg"
            case MediaCategory.VIDEO:
                return "video/mp4"
            case MediaCategory.AUDIO:
                return "audio/mpeg"
            case MediaCategory.DOCUMENT:
                return "application/octet-stream"

    @property
    def extension(self) -> str:
        match self:
            case MediaCategory.IMAGE:
                return "jpg"
            case MediaCategory.VIDEO:
                return "mp4"
            case MediaCategory.AUDIO:
                return "mp3"
            case MediaCategory.DOCUMENT:
                return "bin"


def get_content_type(category: Union[MediaCategory, str]) -> str:
    """Return the MIME type for ``category``.

    Raises:
        ValidationError: If ``category`` is not a known media type.
    """
    return MediaCategory.parse(category).content_type


def get_file_extension(category: Union[MediaCategory, str]) -> str:
    """Return the file extension (without dot) for ``category``.

    Raises:
        ValidationError: If ``category`` is not a known media type.
    """
    return MediaCategory.parse(category).extension
