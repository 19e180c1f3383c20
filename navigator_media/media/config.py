"""
Media Configuration — validated settings for fetching and reaping.

Components receive these objects explicitly; only ``MediaConfig.from_env``
looks at the process environment (through ``navigator_media.conf``).
"""
import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from .. import conf

logger = logging.getLogger("navigator.media")

DEFAULT_ALLOWED_HOSTS = (
    "mmg.whatsapp.net",
    "mmg-fna.whatsapp.net",
    "media-frt3-1.cdn.whatsapp.net",
    "pps.whatsapp.net",
)


class FetchConfig(BaseModel):
    """Retry, timeout and size limits for downloading encrypted media."""

    timeout: float = Field(default=60.0, gt=0)
    max_attempts: int = Field(default=3, ge=1, le=10)
    base_delay: float = Field(default=1.0, ge=0)
    max_size: int = Field(default=100 * 1024 * 1024, gt=0)
    user_agent: str = Field(default=conf.MEDIA_USER_AGENT)
    allowed_hosts: tuple[str, ...] = Field(default=DEFAULT_ALLOWED_HOSTS)

    model_config = {"frozen": True}


class ReaperConfig(BaseModel):
    """Staging directory and age limits for the temp file reaper."""

    staging_dir: Path = Field(default=Path("/tmp/media-decrypt"))
    interval: float = Field(default=3600.0, ge=1)
    max_file_age: float = Field(default=3600.0, gt=0)

    model_config = {"frozen": True}

    @field_validator("staging_dir")
    @classmethod
    def validate_staging_dir(cls, v: Path) -> Path:
        """Reject the filesystem root as a staging directory."""
        if v.resolve() == Path(v.anchor or "/").resolve():
            raise ValueError("staging_dir cannot be the filesystem root")
        return v


class MediaConfig(BaseModel):
    """Validated media service configuration."""

    fetch: FetchConfig = Field(default_factory=FetchConfig)
    reaper: ReaperConfig = Field(default_factory=ReaperConfig)

    @classmethod
    def from_env(cls) -> "MediaConfig":
        """Create MediaConfig from environment-derived defaults.

        Returns:
            Populated MediaConfig instance.
        """
        config = cls(
            fetch=FetchConfig(
                timeout=conf.MEDIA_FETCH_TIMEOUT,
                max_attempts=conf.MEDIA_FETCH_RETRIES,
                base_delay=conf.MEDIA_FETCH_RETRY_DELAY,
                max_size=conf.MEDIA_MAX_SIZE,
                user_agent=conf.MEDIA_USER_AGENT,
            ),
            reaper=ReaperConfig(
                staging_dir=Path(conf.TEMP_DIR),
                interval=conf.CLEANUP_INTERVAL,
                max_file_age=conf.MAX_FILE_AGE,
            ),
        )
        logger.debug(
            "Media config: attempts=%d timeout=%.1fs staging=%s",
            config.fetch.max_attempts,
            config.fetch.timeout,
            config.reaper.staging_dir,
        )
        return config
