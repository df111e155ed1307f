# roadmap_tracker/models/repository.py
"""
Caching repository for roadmap files.

Holds at most one parsed Roadmap per path in an LRU cache. Every cache hit is
confirmed against a fresh os.stat mtime, and optional per-path watchers invalidate
entries as soon as a file is edited or removed behind our back.
"""

import asyncio
import json
import logging
import os
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from roadmap_tracker.background.watcher import FileWatcher, PollingFileWatcher, WatchCallback
from roadmap_tracker.errors import InvalidJsonError, RoadmapNotFoundError
from roadmap_tracker.models.roadmap import Roadmap, dump_roadmap, parse_roadmap

if TYPE_CHECKING:
    from roadmap_tracker.config.schema import PrtConfig

logger = logging.getLogger(__name__)

WatcherFactory = Callable[[str, WatchCallback, WatchCallback], FileWatcher]


@dataclass
class CacheEntry:
    """A cached roadmap and the file mtime it was read (or written) at."""

    data: Roadmap
    source_path: str
    mtime_ns: int


class RoadmapRepository:
    """
    Load and save roadmap documents with an mtime-validated LRU cache.

    Features:
        - Cache hits re-stat the file; any mtime change or stat failure is a miss
        - Least recently used entries are evicted once max_cache_size is reached
        - save() writes through, so the next load() is served from memory
        - Optional file watchers invalidate entries on external edits
    """

    def __init__(
        self,
        cache_enabled: bool = True,
        max_cache_size: int = 10,
        watch_files: bool = True,
        watcher_factory: WatcherFactory = PollingFileWatcher,
    ) -> None:
        """
        Initialize repository.

        Args:
            cache_enabled: Keep parsed roadmaps in memory between loads
            max_cache_size: Maximum number of cached paths (must be >= 1)
            watch_files: Start a watcher for each cached path
            watcher_factory: Callable building a FileWatcher for (path, on_change, on_remove)

        Raises:
            ValueError: If max_cache_size is less than 1
        """
        if max_cache_size < 1:
            raise ValueError(f"max_cache_size must be at least 1, got {max_cache_size}")

        self._cache_enabled = cache_enabled
        self._max_cache_size = max_cache_size
        self._watch_files = watch_files
        self._watcher_factory = watcher_factory

        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._watchers: dict[str, FileWatcher] = {}
        self._closing: set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, config: "PrtConfig", **kwargs) -> "RoadmapRepository":
        """Build a repository using the config's cache settings (defaults when absent)."""
        cache = config.cache
        if cache is not None:
            if cache.enabled is not None:
                kwargs.setdefault("cache_enabled", cache.enabled)
            if cache.max_size is not None:
                kwargs.setdefault("max_cache_size", cache.max_size)
            if cache.watch_files is not None:
                kwargs.setdefault("watch_files", cache.watch_files)
        return cls(**kwargs)

    @property
    def cache_enabled(self) -> bool:
        return self._cache_enabled

    @property
    def max_cache_size(self) -> int:
        return self._max_cache_size

    @property
    def watch_files(self) -> bool:
        return self._watch_files

    async def load(self, path: str | os.PathLike) -> Roadmap:
        """
        Load the roadmap at path, from cache when the file is unchanged.

        Raises:
            RoadmapNotFoundError: If the file does not exist
            InvalidJsonError: If the file is not valid JSON
            ValidationError: If the JSON does not match the roadmap model
        """
        key = os.fspath(path)

        if not self._cache_enabled:
            return await self._load_from_disk(key)

        entry = self._cache.get(key)
        if entry is not None:
            try:
                mtime_ns = await self._stat_mtime(key)
            except OSError as e:
                logger.debug(f"Cache check failed for {key}: {e}")
                mtime_ns = None

            if mtime_ns == entry.mtime_ns:
                self._cache.move_to_end(key)
                logger.debug(f"Cache hit: {key}")
                return entry.data

            logger.debug(f"Cache stale: {key}")
            self._cache.pop(key, None)

        roadmap = await self._load_from_disk(key)
        mtime_ns = await self._stat_mtime(key)
        await self._store(key, roadmap, mtime_ns)

        if self._watch_files and key not in self._watchers:
            await self._start_watcher(key)

        return roadmap

    async def save(self, path: str | os.PathLike, roadmap: Roadmap) -> None:
        """Write roadmap to path as pretty-printed JSON and refresh its cache entry."""
        key = os.fspath(path)
        content = json.dumps(dump_roadmap(roadmap), indent=2, ensure_ascii=False) + "\n"
        await asyncio.to_thread(Path(key).write_text, content, encoding="utf-8")
        logger.debug(f"Saved roadmap: {key} ({len(roadmap.tasks)} tasks)")

        if not self._cache_enabled:
            return

        watcher = self._watchers.get(key)
        if watcher is not None:
            await watcher.refresh()

        mtime_ns = await self._stat_mtime(key)
        await self._store(key, roadmap, mtime_ns)

    def invalidate(self, path: str | os.PathLike) -> None:
        if self._cache.pop(os.fspath(path), None) is not None:
            logger.debug(f"Cache invalidated: {os.fspath(path)}")

    def invalidate_all(self) -> None:
        self._cache.clear()

    def is_cached(self, path: str | os.PathLike) -> bool:
        return os.fspath(path) in self._cache

    def get_cache_size(self) -> int:
        return len(self._cache)

    def is_watching(self, path: str | os.PathLike) -> bool:
        return os.fspath(path) in self._watchers

    async def dispose(self) -> None:
        """Stop every watcher and clear the cache. Safe to call repeatedly."""
        watchers = list(self._watchers.values())
        self._watchers.clear()
        self._cache.clear()

        if watchers:
            await asyncio.gather(*(watcher.close() for watcher in watchers))
            logger.info(f"Stopped {len(watchers)} file watcher(s)")
        if self._closing:
            await asyncio.gather(*self._closing)

    async def _load_from_disk(self, path: str) -> Roadmap:
        try:
            content = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except FileNotFoundError as e:
            raise RoadmapNotFoundError(path) from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise InvalidJsonError(path, str(e)) from e

        logger.debug(f"Loaded roadmap from disk: {path}")
        return parse_roadmap(data)

    async def _stat_mtime(self, path: str) -> int:
        stat = await asyncio.to_thread(os.stat, path)
        return stat.st_mtime_ns

    async def _store(self, key: str, roadmap: Roadmap, mtime_ns: int) -> None:
        # Evict and insert without suspending so the size bound always holds.
        evicted: list[FileWatcher] = []
        self._cache.pop(key, None)
        while len(self._cache) >= self._max_cache_size:
            old_key, _ = self._cache.popitem(last=False)
            logger.debug(f"Cache evicted: {old_key}")
            watcher = self._watchers.pop(old_key, None)
            if watcher is not None:
                evicted.append(watcher)
        self._cache[key] = CacheEntry(data=roadmap, source_path=key, mtime_ns=mtime_ns)

        for watcher in evicted:
            await watcher.close()

    async def _start_watcher(self, path: str) -> None:
        watcher = self._watcher_factory(
            path,
            lambda: self._on_file_changed(path),
            lambda: self._on_file_removed(path),
        )
        try:
            await watcher.start()
        except Exception as e:
            logger.warning(f"Could not watch {path}: {e}")
            return

        if path in self._watchers or path not in self._cache:
            # Another load won the race, or the entry was evicted meanwhile.
            await watcher.close()
            return

        self._watchers[path] = watcher
        logger.info(f"Watching roadmap file: {path}")

    def _on_file_changed(self, path: str) -> None:
        self.invalidate(path)

    def _on_file_removed(self, path: str) -> None:
        self.invalidate(path)
        watcher = self._watchers.pop(path, None)
        if watcher is None:
            return

        logger.info(f"Roadmap file removed, stopping watcher: {path}")
        task = asyncio.get_running_loop().create_task(watcher.close())
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)


_default_repository: RoadmapRepository | None = None


def get_default_repository() -> RoadmapRepository:
    """Return the process-wide repository, creating it on first use."""
    global _default_repository
    if _default_repository is None:
        _default_repository = RoadmapRepository()
    return _default_repository


async def reset_default_repository() -> None:
    """Dispose the process-wide repository so the next get creates a fresh one."""
    global _default_repository
    repository, _default_repository = _default_repository, None
    if repository is not None:
        await repository.dispose()
