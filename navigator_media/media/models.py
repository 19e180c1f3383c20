"""Request and result models for the media pipeline."""
import time
from typing import Any

from pydantic import BaseModel, Field, SecretStr, field_validator

from .categories import MediaCategory
from .fetcher import validate_url


class MediaReference(BaseModel):
    """Where an encrypted object lives and how to open it.

    ``category`` and ``url`` raise ``navigator_media.exceptions.ValidationError``
    directly (not a pydantic error) so the caller sees the same failure kind
    as from ``expand``.
    """

    url: str
    secret: SecretStr
    category: MediaCategory

    model_config = {"frozen": True}

    @field_validator("url")
    @classmethod
    def validate_media_url(cls, v: str) -> str:
        validate_url(v)
        return v

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: Any) -> MediaCategory:
        return MediaCategory.parse(v)


class DecryptedArtifact(BaseModel):
    """Decrypted bytes plus response metadata derived from the category."""

    data: bytes = Field(repr=False)
    category: MediaCategory
    content_type: str
    filename: str

    @classmethod
    def build(cls, data: bytes, category: MediaCategory) -> "DecryptedArtifact":
        return cls(
            data=data,
            category=category,
            content_type=category.content_type,
            filename=f"decrypted_{int(time.time() * 1000)}.{category.extension}",
        )

    @property
    def size(self) -> int:
        return len(self.data)
