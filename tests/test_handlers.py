"""
Tests for the aiohttp glue layer.

Tests cover:
- Successful decrypt responses and headers
- Error mapping for each failure kind
- Per-request option overrides
- Health endpoint and reaper lifecycle
"""
import pytest
from aiohttp import web
from aiohttp import test_utils
from pydantic import ValidationError as PydanticValidationError

from conftest import MEDIA_URL, StubResponse, StubSession
from navigator_media.exceptions import (
    DecryptionError,
    InternalError,
    MediaError,
    NetworkError,
    ValidationError,
)
from navigator_media.handlers import (
    DecryptOptions,
    MEDIA_REAPER,
    error_response,
    setup_media,
)
from navigator_media.media.config import FetchConfig, MediaConfig, ReaperConfig
from navigator_media.media.crypto import encrypt_payload
from navigator_media.media.keys import expand_media_key


def make_app(tmp_path, session) -> web.Application:
    config = MediaConfig(
        fetch=FetchConfig(max_attempts=3, base_delay=0),
        reaper=ReaperConfig(staging_dir=tmp_path / "staging", interval=60),
    )
    return setup_media(web.Application(), config, session=session)


def body_for(secret: str, category: str = "image", url: str = MEDIA_URL) -> dict:
    return {"mediaUrl": url, "mediaKey": secret, "mediaType": category}


class TestErrorResponse:
    """Tests for error_response mapping."""

    @pytest.mark.parametrize(
        "error,status",
        [
            (ValidationError("bad", field="mediaKey"), 400),
            (DecryptionError("MAC mismatch detail"), 422),
            (NetworkError("HTTP 500 detail"), 502),
            (InternalError("stack detail"), 500),
            (MediaError("unclassified detail"), 500),
        ],
    )
    def test_status_codes(self, error, status):
        response = error_response(error, "req-1")
        assert response.status == status

    def test_internal_detail_not_exposed(self):
        response = error_response(
            InternalError("boom", original_error=RuntimeError("secret path")), "r"
        )
        assert b"secret path" not in response.body
        assert b"boom" not in response.body

    def test_decryption_detail_not_exposed(self):
        response = error_response(DecryptionError("payload too small"), "r")
        assert b"Invalid media key or corrupted file" in response.body
        assert b"payload too small" not in response.body


class TestDecryptOptions:
    """Tests for per-request overrides."""

    def test_apply(self):
        config = DecryptOptions(timeout=5000, retries=2).apply(FetchConfig())
        assert config.timeout == 5.0
        assert config.max_attempts == 2

    def test_no_overrides_keeps_base(self):
        base = FetchConfig()
        assert DecryptOptions().apply(base) is base

    def test_fractional_timeout(self):
        options = DecryptOptions.model_validate({"timeout": 5000.5})
        assert options.apply(FetchConfig()).timeout == pytest.approx(5.0005)

    def test_timeout_below_minimum(self):
        with pytest.raises(PydanticValidationError):
            DecryptOptions(timeout=4999.5)


class TestDecryptEndpoint:
    """Tests for POST /api/v1/decrypt."""

    @pytest.mark.asyncio
    async def test_success(self, tmp_path, random_secret):
        with expand_media_key(random_secret, "image") as keys:
            payload = encrypt_payload(b"\xff\xd8jpeg", keys)
        app = make_app(tmp_path, StubSession(StubResponse(200, payload)))
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.post("/api/v1/decrypt", json=body_for(random_secret))
            assert resp.status == 200
            assert await resp.read() == b"\xff\xd8jpeg"
            assert resp.headers["Content-Type"] == "image/jpeg"
            assert resp.headers["Content-Disposition"].startswith(
                'attachment; filename="decrypted_'
            )
            assert resp.headers["X-Content-Type-Options"] == "nosniff"
            assert "no-store" in resp.headers["Cache-Control"]

    @pytest.mark.asyncio
    async def test_unknown_media_type(self, tmp_path, random_secret):
        session = StubSession(StubResponse(200, b""))
        app = make_app(tmp_path, session)
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.post(
                "/api/v1/decrypt", json=body_for(random_secret, category="sticker")
            )
            assert resp.status == 400
            data = await resp.json()
            assert data["field"] == "mediaType"
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_missing_field(self, tmp_path, random_secret):
        app = make_app(tmp_path, StubSession(StubResponse(200, b"")))
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.post(
                "/api/v1/decrypt", json={"mediaUrl": MEDIA_URL, "mediaKey": random_secret}
            )
            assert resp.status == 400
            assert (await resp.json())["field"] == "mediaType"

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path):
        app = make_app(tmp_path, StubSession(StubResponse(200, b"")))
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.post("/api/v1/decrypt", data=b"{not json")
            assert resp.status == 400

    @pytest.mark.asyncio
    async def test_network_failure(self, tmp_path, random_secret):
        session = StubSession(StubResponse(500, b""))
        app = make_app(tmp_path, session)
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.post("/api/v1/decrypt", json=body_for(random_secret))
            assert resp.status == 502
            data = await resp.json()
            assert data["message"] == "Failed to download media file"
        assert len(session.calls) == 3

    @pytest.mark.asyncio
    async def test_retries_option(self, tmp_path, random_secret):
        session = StubSession(StubResponse(500, b""))
        app = make_app(tmp_path, session)
        body = {**body_for(random_secret), "options": {"retries": 2}}
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.post("/api/v1/decrypt", json=body)
            assert resp.status == 502
        assert len(session.calls) == 2

    @pytest.mark.asyncio
    async def test_decryption_failure(self, tmp_path, random_secret, zero_secret):
        with expand_media_key(zero_secret, "image") as keys:
            payload = encrypt_payload(b"wrong key", keys)
        app = make_app(tmp_path, StubSession(StubResponse(200, payload)))
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.post("/api/v1/decrypt", json=body_for(random_secret))
            assert resp.status == 422
            data = await resp.json()
            assert data["error"] == "Decryption failed"
            assert data["message"] == "Invalid media key or corrupted file"


class TestHealthEndpoint:
    """Tests for GET /api/v1/health and lifecycle wiring."""

    @pytest.mark.asyncio
    async def test_health(self, tmp_path):
        app = make_app(tmp_path, StubSession(StubResponse(200, b"")))
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.get("/api/v1/health")
            assert resp.status == 200
            data = await resp.json()
            assert data["status"] == "healthy"
            assert data["reaper"] is True
        assert (tmp_path / "staging").is_dir()
        assert app[MEDIA_REAPER].running is False
