"""
Media Fetcher — download encrypted media over HTTPS with bounded retries.

Each attempt is a single GET bounded by ``FetchConfig.timeout``. Failed
attempts (transport errors, timeouts, non-2xx status) are retried with a
linear backoff of ``base_delay * attempt``. A response larger than
``max_size`` fails immediately and is not retried.

Cancelling the calling task aborts the in-flight request; the connection
and any partially read body are released by the ``async with`` blocks.
"""
import asyncio
import logging
from typing import Optional
from urllib.parse import urlsplit

import aiohttp

from ..exceptions import NetworkError, ValidationError
from .config import FetchConfig

logger = logging.getLogger("navigator.media")

CHUNK_SIZE = 64 * 1024


class ResponseStatusError(Exception):
    """Non-success HTTP status on a single attempt."""

    def __init__(self, status: int, reason: Optional[str] = None):
        super().__init__(f"HTTP {status}: {reason}" if reason else f"HTTP {status}")
        self.status = status
        self.reason = reason


_RETRYABLE = (aiohttp.ClientError, asyncio.TimeoutError, ResponseStatusError)


def short_url(url: str, length: int = 50) -> str:
    """Truncate ``url`` for logging; media URLs carry signed query strings."""
    return url if len(url) <= length else f"{url[:length]}..."


def validate_url(url: str, allowed_hosts: tuple[str, ...] = ()) -> str:
    """Check that ``url`` is an https URL with a host.

    A host outside ``allowed_hosts`` only logs a warning, CDN hosts rotate.

    Returns:
        The hostname of ``url``.

    Raises:
        ValidationError: If the URL is malformed or not https.
    """
    if not isinstance(url, str) or not url:
        raise ValidationError("Media URL is required", field="mediaUrl")
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError as err:
        raise ValidationError(
            f"Invalid media URL: {err}", field="mediaUrl"
        ) from err
    if parts.scheme != "https":
        raise ValidationError(
            "Invalid media URL: URL must use HTTPS protocol", field="mediaUrl"
        )
    if not hostname:
        raise ValidationError("Invalid media URL: missing host", field="mediaUrl")
    if allowed_hosts and not any(
        hostname == host or hostname.endswith(f".{host}") for host in allowed_hosts
    ):
        logger.warning(
            "URL may not be a valid media CDN URL (%s)", hostname
        )
    return hostname


async def _backoff(delay: float) -> None:
    await asyncio.sleep(delay)


class MediaFetcher:
    """Download encrypted media objects.

    Args:
        config: Retry/timeout/size settings.
        session: Optional shared ``aiohttp.ClientSession``. When omitted a
            session is opened for each ``fetch`` call.
    """

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.config = config or FetchConfig()
        self._session = session

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.config.user_agent,
            "Accept": "*/*",
            # payloads are encrypted, compression buys nothing
            "Accept-Encoding": "identity",
            "Cache-Control": "no-cache",
        }

    async def fetch(self, url: str) -> bytes:
        """Download ``url`` and return the raw encrypted bytes.

        Raises:
            ValidationError: If the URL is not https.
            NetworkError: If every attempt failed or the object is too large.
        """
        validate_url(url, self.config.allowed_hosts)
        if self._session is not None:
            return await self._fetch_with_retries(self._session, url)
        async with aiohttp.ClientSession() as session:
            return await self._fetch_with_retries(session, url)

    async def _fetch_with_retries(
        self, session: aiohttp.ClientSession, url: str
    ) -> bytes:
        attempts = self.config.max_attempts
        last_error: Optional[BaseException] = None
        for attempt in range(1, attempts + 1):
            try:
                logger.debug(
                    "Download attempt %d/%d: %s", attempt, attempts, short_url(url)
                )
                data = await self._fetch_once(session, url)
                logger.info("Download completed: %d bytes", len(data))
                return data
            except _RETRYABLE as err:
                last_error = err
                if attempt < attempts:
                    delay = self.config.base_delay * attempt
                    logger.warning(
                        "Download attempt %d/%d failed (%s), retrying in %.2fs",
                        attempt, attempts, type(err).__name__, delay,
                    )
                    await _backoff(delay)
        logger.error("All %d download attempts failed: %s", attempts, short_url(url))
        raise NetworkError(
            f"Failed to download after {attempts} attempts: {last_error}",
            original_error=last_error,
        ) from last_error

    async def _fetch_once(self, session: aiohttp.ClientSession, url: str) -> bytes:
        max_size = self.config.max_size
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        async with session.get(url, headers=self.headers, timeout=timeout) as response:
            if not 200 <= response.status < 300:
                raise ResponseStatusError(response.status, response.reason)
            declared = response.content_length
            if declared is not None and declared > max_size:
                raise NetworkError(
                    f"Media object too large: {declared} bytes (limit {max_size})"
                )
            buffer = bytearray()
            async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                buffer.extend(chunk)
                if len(buffer) > max_size:
                    raise NetworkError(
                        f"Media object exceeds size limit of {max_size} bytes"
                    )
            return bytes(buffer)


async def fetch_media(
    url: str,
    config: Optional[FetchConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> bytes:
    """Download an encrypted media object. See ``MediaFetcher.fetch``."""
    return await MediaFetcher(config, session=session).fetch(url)
