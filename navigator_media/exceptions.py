"""
Error taxonomy for Navigator Media.

Every failure leaving the core is one of four variants:

- ``ValidationError``: bad secret, unknown category, non-https URL.
- ``NetworkError``: the object could not be fetched within the retry budget.
- ``DecryptionError``: undersized payload, MAC mismatch, bad padding.
- ``InternalError``: anything else, wrapped so library details stay internal.

``public_message`` is what a caller may show to the outside world;
``message`` and ``original_error`` are for logs only.
"""
from typing import Optional


class MediaError(Exception):
    """Base class for all Navigator Media failures."""

    status: int = 500
    public_message: str = "Media processing failed"

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(MediaError):
    """Input rejected before any network or cryptographic work."""

    status = 400
    public_message = "Invalid input parameters"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NetworkError(MediaError):
    """Fetching the encrypted object failed after all attempts."""

    status = 502
    public_message = "Failed to download media file"


class DecryptionError(MediaError):
    """Integrity check or decryption failed."""

    status = 422
    public_message = "Invalid media key or corrupted file"


class InternalError(MediaError):
    """Unexpected failure inside the core."""

    status = 500
    public_message = "Media processing failed"
