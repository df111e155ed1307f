# roadmap_tracker/background/watcher.py
"""
File watchers used by the roadmap repository to notice external edits.

A watcher is created per path and reports two events through plain callbacks:
    - on_change: the file's mtime or size changed
    - on_remove: the file disappeared (the watcher stops itself afterwards)

Callbacks run on the event loop and must only do cache bookkeeping; they never
re-enter I/O such as loading the roadmap again.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable

logger = logging.getLogger(__name__)

WatchCallback = Callable[[], None]


class FileWatcher(ABC):
    """
    Abstract base class for per-path file watchers.

    Implementations are constructed with the path and two callbacks, then started
    with `await start()` and stopped with `await close()`.
    """

    def __init__(self, path: str, on_change: WatchCallback, on_remove: WatchCallback) -> None:
        self._path = path
        self._on_change = on_change
        self._on_remove = on_remove

    @property
    def path(self) -> str:
        return self._path

    @abstractmethod
    async def start(self) -> None:
        """
        Begin watching.

        Raises:
            OSError: If the path cannot be watched (e.g. it does not exist)
        """
        pass

    @abstractmethod
    async def refresh(self) -> None:
        """Accept the file's current state as the baseline (used after our own writes)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Stop watching. Safe to call more than once."""
        pass


class PollingFileWatcher(FileWatcher):
    """
    Watches a file by polling os.stat from an asyncio task.

    Features:
        - No extra threads or OS notification APIs
        - Compares (mtime_ns, size) so same-second rewrites are still noticed
        - Stops itself after reporting a removal
    """

    def __init__(
        self,
        path: str,
        on_change: WatchCallback,
        on_remove: WatchCallback,
        poll_interval: float = 0.25,
    ) -> None:
        """
        Initialize polling watcher.

        Args:
            path: File to watch
            on_change: Called when the file is modified
            on_remove: Called when the file is deleted
            poll_interval: Seconds between stat calls (default: 0.25)
        """
        super().__init__(path, on_change, on_remove)
        self._poll_interval = poll_interval
        self._snapshot: tuple[int, int] | None = None
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is not None:
            logger.warning(f"Watcher for {self._path} already started")
            return

        self._snapshot = await asyncio.to_thread(self._stat)
        self._task = asyncio.create_task(self._run_loop())
        logger.debug(f"Watching {self._path} (poll every {self._poll_interval}s)")

    async def refresh(self) -> None:
        try:
            self._snapshot = await asyncio.to_thread(self._stat)
        except FileNotFoundError:
            self._snapshot = None

    async def close(self) -> None:
        task = self._task
        if task is None:
            return

        self._task = None
        if task is asyncio.current_task():
            # Closed from inside our own callback; the loop exits on its own.
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug(f"Stopped watching {self._path}")

    def _stat(self) -> tuple[int, int]:
        st = os.stat(self._path)
        return st.st_mtime_ns, st.st_size

    async def _run_loop(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)

            try:
                current = await asyncio.to_thread(self._stat)
            except FileNotFoundError:
                logger.info(f"Watched file removed: {self._path}")
                self._notify(self._on_remove)
                return
            except OSError as e:
                logger.warning(f"Could not stat watched file {self._path}: {e}")
                continue

            if current != self._snapshot:
                self._snapshot = current
                logger.debug(f"Watched file changed: {self._path}")
                self._notify(self._on_change)

    def _notify(self, callback: WatchCallback) -> None:
        try:
            callback()
        except Exception as e:
            logger.error(f"Watcher callback for {self._path} failed: {e}")
