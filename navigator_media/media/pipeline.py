"""
Media Pipeline — fetch, verify and decrypt in one call.

``decrypt_from_url`` takes ownership of the key set it is given and wipes
it before returning or raising. ``decrypt_media`` runs the whole flow from
a ``MediaReference``:

    validate -> expand keys -> fetch -> verify MAC -> decrypt -> wipe

Any exception outside the media error taxonomy is wrapped in
``InternalError`` so library messages never reach the caller.
"""
import logging
import time
from typing import Optional

import aiohttp

from ..exceptions import InternalError, MediaError
from .config import FetchConfig
from .crypto import decrypt_payload
from .fetcher import MediaFetcher, short_url
from .keys import ExpandedKeySet, expanded_keys
from .models import DecryptedArtifact, MediaReference

logger = logging.getLogger("navigator.media")


async def decrypt_from_url(
    url: str,
    keys: ExpandedKeySet,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> bytes:
    """Download the object at ``url`` and decrypt it with ``keys``.

    ``keys`` is wiped on every exit path.

    Args:
        url: https URL of the encrypted object.
        keys: Live key set from ``expand``.
        fetch_config: Timeout/retry settings, defaults to ``FetchConfig()``.
        session: Optional shared ``aiohttp.ClientSession``.

    Returns:
        Decrypted plaintext bytes.

    Raises:
        ValidationError: If ``url`` is not https.
        NetworkError: If the download failed after every attempt.
        DecryptionError: If the MAC or padding check failed.
        InternalError: On any other failure.
    """
    with keys:
        try:
            fetcher = MediaFetcher(fetch_config, session=session)
            payload = await fetcher.fetch(url)
            return decrypt_payload(payload, keys)
        except MediaError:
            raise
        except Exception as err:
            logger.exception("Unexpected error decrypting %s", short_url(url))
            raise InternalError("Unexpected decryption error", original_error=err) from err


async def decrypt_media(
    reference: MediaReference,
    fetch_config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> DecryptedArtifact:
    """Expand the reference's key, then fetch and decrypt its object.

    The key is validated before any network call is made.

    Returns:
        ``DecryptedArtifact`` with plaintext, content type and filename.
    """
    started = time.monotonic()
    category = reference.category
    logger.info(
        "Starting media decryption: type=%s url=%s",
        category.value, short_url(reference.url),
    )
    try:
        with expanded_keys(reference.secret.get_secret_value(), category) as keys:
            data = await decrypt_from_url(reference.url, keys, fetch_config, session)
        artifact = DecryptedArtifact.build(data, category)
    except MediaError as err:
        logger.error(
            "Media decryption failed: type=%s error=%s (%.0f ms)",
            category.value, type(err).__name__,
            (time.monotonic() - started) * 1000,
        )
        raise
    except Exception as err:
        logger.exception("Media processing failed: type=%s", category.value)
        raise InternalError("Media processing failed", original_error=err) from err
    logger.info(
        "Media decryption completed: type=%s size=%d (%.0f ms)",
        category.value, artifact.size, (time.monotonic() - started) * 1000,
    )
    return artifact
