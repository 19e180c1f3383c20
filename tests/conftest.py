"""Shared fixtures and HTTP stubs for the media tests."""
import asyncio
import base64
from typing import Any, Optional, Union

import pytest

from navigator_media.media.keys import expand_media_key


ZERO_SECRET = base64.b64encode(bytes(32)).decode("ascii")
MEDIA_URL = "https://mmg.whatsapp.net/d/f/AbCdEf0123456789.enc"


class StubContent:
    """Mimics ``aiohttp.StreamReader.iter_chunked``."""

    def __init__(self, data: bytes):
        self._data = data

    async def iter_chunked(self, n: int):
        for i in range(0, len(self._data), n):
            yield self._data[i:i + n]


class StubResponse:
    def __init__(
        self,
        status: int = 200,
        body: bytes = b"",
        reason: Optional[str] = None,
        content_length: Optional[int] = -1,
    ):
        self.status = status
        self.reason = reason or ("OK" if status == 200 else "Error")
        self.content_length = len(body) if content_length == -1 else content_length
        self.content = StubContent(body)


class _RequestContext:
    def __init__(self, session: "StubSession", outcome: Any):
        self._session = session
        self._outcome = outcome

    async def __aenter__(self):
        if isinstance(self._outcome, asyncio.Event):
            await self._outcome.wait()
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome

    async def __aexit__(self, exc_type, exc, tb):
        self._session.released += 1
        return False


class StubSession:
    """Replays a scripted list of outcomes, one per ``get`` call.

    An outcome is a ``StubResponse``, an exception to raise, or an
    ``asyncio.Event`` to wait on (used to hold a request open). The last
    outcome repeats once the script runs out.
    """

    def __init__(self, *outcomes: Union[StubResponse, BaseException, asyncio.Event]):
        self._outcomes = list(outcomes)
        self.calls: list[dict] = []
        self.released = 0
        self.closed = False

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        index = min(len(self.calls) - 1, len(self._outcomes) - 1)
        return _RequestContext(self, self._outcomes[index])

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True
        return False


@pytest.fixture
def zero_secret():
    return ZERO_SECRET


@pytest.fixture
def media_url():
    return MEDIA_URL


@pytest.fixture
def random_secret():
    return base64.b64encode(bytes(range(32))).decode("ascii")


@pytest.fixture
def document_keys(zero_secret):
    keys = expand_media_key(zero_secret, "document")
    yield keys
    keys.wipe()
