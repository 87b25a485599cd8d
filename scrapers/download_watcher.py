"""
Filesystem polling for browser-initiated downloads.

The browser gives no "download finished" signal we can rely on once the
download target has been redirected with CDP, so completion is inferred from
the directory itself:

  - nothing matching the suffix yet      → not started, keep polling
  - matching file, size 0 or still moving → still writing, keep polling
  - matching file, size > 0 and unchanged
    after the settle delay              → complete

Chromium writes in-progress downloads as ``*.crdownload`` and renames on
completion, so the suffix filter already hides most partial files; the size
check covers browsers and servers that stream straight into the final name.
"""
import logging
import shutil
import time
from pathlib import Path
from typing import Callable, Optional

from .exceptions import DownloadDirectoryLost, DownloadTimeout

logger = logging.getLogger(__name__)


class DownloadWatcher:
    """Wait for exactly one completed file to land in ``directory``.

    The watcher only reads the directory while polling. On timeout it removes
    the directory and its contents before raising.
    """

    def __init__(
        self,
        directory: Path,
        timeout: float = 30.0,
        poll_interval: float = 1.0,
        suffix: str = ".csv",
        settle_delay: float = 0.5,
        stable_checks: int = 1,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise DownloadDirectoryLost(f"Download directory {self.directory} does not exist.")
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.suffix = suffix
        self.settle_delay = settle_delay
        self.stable_checks = max(1, stable_checks)
        self._sleep = sleep
        self._clock = clock

    def wait(self) -> Path:
        """Block until a completed file appears. Returns its path."""
        deadline = self._clock() + self.timeout
        logger.info(
            "[Download] Watching %s for *%s (timeout %.0fs)",
            self.directory, self.suffix, self.timeout,
        )

        while self._clock() <= deadline:
            try:
                found = self._poll_once()
            except OSError as exc:
                logger.warning("[Download] Polling warning: %s", exc)
                found = None

            if found is not None:
                path, size = found
                logger.info("[Download] Complete: %s (%d bytes)", path, size)
                return path
            self._sleep(self.poll_interval)

        self._remove_directory()
        raise DownloadTimeout(f"Download timeout after {self.timeout:g} seconds")

    def _poll_once(self) -> Optional[tuple[Path, int]]:
        try:
            entries = sorted(self.directory.iterdir())
        except FileNotFoundError:
            raise DownloadDirectoryLost(
                f"Download directory {self.directory} disappeared unexpectedly."
            ) from None

        for entry in entries:
            if not entry.name.endswith(self.suffix):
                continue
            try:
                size = self._stable_size(entry)
                if size:
                    return entry, size
            except FileNotFoundError:
                if not self.directory.is_dir():
                    raise DownloadDirectoryLost(
                        f"Download directory {self.directory} disappeared unexpectedly."
                    ) from None
                # renamed or replaced by the browser between listing and stat
                logger.debug("[Download] %s vanished mid-check", entry.name)
        return None

    def _stable_size(self, path: Path) -> int:
        """Size of ``path`` once it has stopped growing, 0 while it is empty or still moving."""
        size = path.stat().st_size
        if size <= 0:
            return 0
        for _ in range(self.stable_checks):
            self._sleep(self.settle_delay)
            current = path.stat().st_size
            if current != size:
                logger.debug("[Download] %s still growing (%d → %d bytes)", path.name, size, current)
                return 0
        return size

    def _remove_directory(self) -> None:
        try:
            shutil.rmtree(self.directory)
            logger.info("[Download] Removed %s after timeout", self.directory)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.error("[Download] Error cleaning up %s on timeout: %s", self.directory, exc)
