"""
Temp File Reaper — periodic cleanup of the staging directory.

Runs as an asyncio task on its own interval, independent of request
handling. Each scan is synchronous filesystem work pushed to a worker
thread with ``asyncio.to_thread`` so the event loop never blocks on it.

Files removed by someone else between listing and deleting are not an
error. Any other per-file failure is logged and the scan moves on.
"""
import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from .config import ReaperConfig

logger = logging.getLogger("navigator.media")


class TempFileReaper:
    """Delete staged files older than ``max_file_age``.

    Args:
        config: Staging directory, scan interval and max file age.
        clock: Returns the current time as epoch seconds; ``time.time``
            by default.
    """

    def __init__(
        self,
        config: Optional[ReaperConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = config or ReaperConfig()
        self._clock = clock or time.time
        self._shutdown = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def staging_dir(self) -> Path:
        return self.config.staging_dir

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def ensure_directory(self) -> None:
        """Create the staging directory if needed."""
        self.staging_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Staging directory ensured: %s", self.staging_dir)

    def reap_once(self, now: Optional[float] = None) -> list[Path]:
        """Scan the staging directory once and delete aged entries.

        Args:
            now: Reference time (epoch seconds); defaults to the clock.

        Returns:
            Paths that this scan deleted.
        """
        current = self._clock() if now is None else now
        max_age = self.config.max_file_age
        removed: list[Path] = []
        try:
            entries = list(self.staging_dir.iterdir())
        except FileNotFoundError:
            return removed
        for path in entries:
            try:
                if not path.is_file():
                    continue
                if current - path.stat().st_mtime > max_age:
                    path.unlink()
                    removed.append(path)
            except FileNotFoundError:
                # deleted by another actor
                continue
            except OSError as err:
                logger.warning("Failed to reap %s: %s", path.name, err)
        if removed:
            logger.info("Cleanup completed: %d file(s) removed", len(removed))
        return removed

    async def run(self) -> None:
        """Reap on every interval until ``stop`` is called."""
        interval = self.config.interval
        while not self._shutdown.is_set():
            try:
                await asyncio.to_thread(self.reap_once)
            except Exception:
                logger.exception("Cleanup iteration failed")
            try:
                await asyncio.wait_for(self._shutdown.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

    def start(self) -> asyncio.Task:
        """Start the periodic scan as a background task."""
        if self.running:
            return self._task
        self._shutdown.clear()
        self._task = asyncio.create_task(self.run(), name="navigator-media-reaper")
        logger.info(
            "Cleanup scheduler started: interval=%.0fs max_age=%.0fs",
            self.config.interval, self.config.max_file_age,
        )
        return self._task

    async def stop(self) -> None:
        """Signal the periodic scan to stop and wait for it."""
        self._shutdown.set()
        if self._task is not None:
            try:
                await self._task
            finally:
                self._task = None

    async def drain(self) -> list[Path]:
        """Run a final best-effort scan at shutdown; never raises."""
        try:
            return await asyncio.to_thread(self.reap_once)
        except Exception:
            logger.exception("Final cleanup failed")
            return []
