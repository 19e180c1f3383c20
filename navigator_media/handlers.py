"""
aiohttp glue for the media core.

Registers two routes on an application:

    POST /api/v1/decrypt   decrypt a media object, reply with its bytes
    GET  /api/v1/health    liveness information

and ties a shared ``ClientSession`` and the ``TempFileReaper`` to the
application lifecycle. Authentication, rate limiting and CORS belong to
the hosting application.
"""
import logging
import time
import uuid
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from typing import Any, Optional

import aiohttp
import orjson
from aiohttp import web
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import (
    DecryptionError,
    InternalError,
    MediaError,
    NetworkError,
    ValidationError,
)
from .media import (
    FetchConfig,
    MediaConfig,
    MediaReference,
    TempFileReaper,
    decrypt_media,
)
from .version import __version__

logger = logging.getLogger("navigator.media")

MEDIA_CONFIG = web.AppKey("navigator_media.config", MediaConfig)
MEDIA_SESSION = web.AppKey("navigator_media.session", aiohttp.ClientSession)
MEDIA_REAPER = web.AppKey("navigator_media.reaper", TempFileReaper)
MEDIA_STARTED = web.AppKey("navigator_media.started", float)


def _dumps(obj: Any) -> str:
    return orjson.dumps(obj).decode("utf-8")


class DecryptOptions(BaseModel):
    """Per-request overrides, in the units the HTTP API uses."""

    timeout: Optional[float] = Field(default=None, ge=5000, le=300000)  # ms
    retries: Optional[int] = Field(default=None, ge=1, le=5)

    def apply(self, base: FetchConfig) -> FetchConfig:
        changes: dict[str, Any] = {}
        if self.timeout is not None:
            changes["timeout"] = self.timeout / 1000.0
        if self.retries is not None:
            changes["max_attempts"] = self.retries
        return base.model_copy(update=changes) if changes else base


class DecryptRequest(BaseModel):
    mediaUrl: str
    mediaKey: str = Field(min_length=32, max_length=100)
    mediaType: str
    options: DecryptOptions = Field(default_factory=DecryptOptions)


def error_response(err: MediaError, request_id: Optional[str] = None) -> web.Response:
    """Map a media error to a JSON response without leaking internals."""
    match err:
        case ValidationError():
            status = ValidationError.status
            body = {
                "error": err.public_message,
                "message": err.message,
                "field": err.field,
            }
        case DecryptionError():
            status = DecryptionError.status
            body = {"error": "Decryption failed", "message": err.public_message}
        case NetworkError():
            status = NetworkError.status
            body = {"error": "Network error", "message": err.public_message}
        case _:
            status = InternalError.status
            body = {
                "error": "Internal server error",
                "message": InternalError.public_message,
            }
    body["requestId"] = request_id
    return web.json_response(body, status=status, dumps=_dumps)


async def _parse_request(request: web.Request) -> tuple[MediaReference, DecryptOptions]:
    try:
        payload = await request.json(loads=orjson.loads)
    except (orjson.JSONDecodeError, UnicodeDecodeError) as err:
        raise ValidationError("Request body must be valid JSON") from err
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        body = DecryptRequest.model_validate(payload)
    except PydanticValidationError as err:
        first = err.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationError(first.get("msg", "Invalid request"), field=field) from err
    reference = MediaReference(
        url=body.mediaUrl, secret=body.mediaKey, category=body.mediaType
    )
    return reference, body.options


async def decrypt_handler(request: web.Request) -> web.StreamResponse:
    """Decrypt the media object described by the JSON body."""
    request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
    app = request.app
    try:
        reference, options = await _parse_request(request)
        fetch_config = options.apply(app[MEDIA_CONFIG].fetch)
        artifact = await decrypt_media(
            reference, fetch_config, session=app.get(MEDIA_SESSION)
        )
    except MediaError as err:
        return error_response(err, request_id)
    return web.Response(
        body=artifact.data,
        headers={
            "Content-Type": artifact.content_type,
            "Content-Disposition": f'attachment; filename="{artifact.filename}"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "X-Content-Type-Options": "nosniff",
            "X-Request-Id": request_id,
        },
    )


async def health_handler(request: web.Request) -> web.Response:
    started = request.app.get(MEDIA_STARTED, time.monotonic())
    reaper = request.app.get(MEDIA_REAPER)
    return web.json_response(
        {
            "status": "healthy",
            "service": "media-decryption",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": int(time.monotonic() - started),
            "reaper": bool(reaper and reaper.running),
            "version": __version__,
        },
        dumps=_dumps,
    )


async def _media_context(app: web.Application) -> AsyncIterator[None]:
    app[MEDIA_STARTED] = time.monotonic()
    reaper = app[MEDIA_REAPER]
    reaper.ensure_directory()
    reaper.start()
    try:
        if MEDIA_SESSION in app:
            # caller-owned session, caller closes it
            yield
        else:
            async with aiohttp.ClientSession() as session:
                app[MEDIA_SESSION] = session
                yield
    finally:
        await reaper.stop()
        await reaper.drain()


def setup_media(
    app: web.Application,
    config: Optional[MediaConfig] = None,
    prefix: str = "/api/v1",
    session: Optional[aiohttp.ClientSession] = None,
) -> web.Application:
    """Install the media routes and background services on ``app``.

    Args:
        app: aiohttp application.
        config: Media configuration; ``MediaConfig.from_env()`` if omitted.
        prefix: URL prefix for the routes.
        session: Optional ``ClientSession`` to share for downloads; one is
            created for the application lifetime when omitted.
    """
    config = config or MediaConfig.from_env()
    app[MEDIA_CONFIG] = config
    app[MEDIA_REAPER] = TempFileReaper(config.reaper)
    if session is not None:
        app[MEDIA_SESSION] = session
    app.router.add_post(f"{prefix}/decrypt", decrypt_handler)
    app.router.add_get(f"{prefix}/health", health_handler)
    app.cleanup_ctx.append(_media_context)
    return app
