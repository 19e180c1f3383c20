"""
Environment defaults for Navigator Media.

Values are read once, at import time. Components never consult the
environment themselves; they receive a config object built from these
values (see ``MediaConfig.from_env``).

Millisecond variables keep the units used by the original deployment
(``CLEANUP_INTERVAL``, ``MAX_FILE_AGE``, ``MEDIA_FETCH_RETRY_DELAY``).
"""
import os


def _ms_to_seconds(name: str, default_ms: int) -> float:
    return int(os.environ.get(name, default_ms)) / 1000.0


TEMP_DIR = os.environ.get("TEMP_DIR", "/tmp/media-decrypt")
CLEANUP_INTERVAL = _ms_to_seconds("CLEANUP_INTERVAL", 3_600_000)
MAX_FILE_AGE = _ms_to_seconds("MAX_FILE_AGE", 3_600_000)

MEDIA_FETCH_TIMEOUT = _ms_to_seconds("MEDIA_FETCH_TIMEOUT", 60_000)
MEDIA_FETCH_RETRIES = int(os.environ.get("MEDIA_FETCH_RETRIES", 3))
MEDIA_FETCH_RETRY_DELAY = _ms_to_seconds("MEDIA_FETCH_RETRY_DELAY", 1_000)
MEDIA_MAX_SIZE = int(os.environ.get("MEDIA_MAX_SIZE", 100 * 1024 * 1024))

MEDIA_USER_AGENT = os.environ.get(
    "MEDIA_USER_AGENT",
    "WhatsApp/2.23.20 (iPhone; iOS 16.6; Scale/3.00)",
)
