# roadmap_tracker/config/loader.py
"""
Configuration loading from layered .prtrc.json files.

Search order (highest precedence first):
    1. ./.prtrc.json                       project
    2. ~/.prtrc.json                       user home
    3. <user config dir>/prt/.prtrc.json   via platformdirs
    4. /etc/prt/.prtrc.json                system (not on Windows)

Every file that exists is merged, higher precedence over lower. The `cache` and
`metadata` objects merge key by key; everything else is replaced wholesale.
"""

import asyncio
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_path

from roadmap_tracker.errors import (
    ConfigNotFoundError,
    InvalidJsonError,
    ValidationError,
    ValidationErrorDetail,
)

from .schema import PrtConfig, validate_config

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".prtrc.json"

# Nested objects merged key by key instead of replaced.
MERGED_SECTIONS = ("cache", "metadata")


def get_default_search_paths() -> list[Path]:
    """Config file candidates, highest precedence first."""
    paths = [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / CONFIG_FILE_NAME,
        user_config_path("prt") / CONFIG_FILE_NAME,
    ]
    if not sys.platform.startswith("win"):
        paths.append(Path("/etc/prt") / CONFIG_FILE_NAME)
    return paths


def merge_configs(configs: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Merge raw config dicts given highest precedence first.

    Starts from the last (lowest) config and applies each higher one over it. Keys
    present in a higher config win; keys it omits are inherited. A null cache or
    metadata section in a higher config keeps the lower one.
    """
    merged: dict[str, Any] = {}
    for config in reversed(configs):
        for key, value in config.items():
            current = merged.get(key)
            if key in MERGED_SECTIONS and value is None and current is not None:
                continue
            if key in MERGED_SECTIONS and isinstance(value, dict) and isinstance(current, dict):
                merged[key] = {**current, **value}
            else:
                merged[key] = value
    return merged


@dataclass
class CachedConfig:
    config: PrtConfig
    source_path: str
    mtime_ns: int


class ConfigRepository:
    """
    Resolves the effective configuration, caching the merged result.

    The cache holds a single merged config keyed on the highest-precedence file that
    existed at load time. Edits to that file are picked up on the next load; edits to
    lower-precedence files need reload().
    """

    def __init__(
        self,
        cache_enabled: bool = True,
        search_paths: list[str | os.PathLike] | None = None,
    ) -> None:
        """
        Initialize config repository.

        Args:
            cache_enabled: Reuse the merged config while its source file is unchanged
            search_paths: Candidate files, highest precedence first (default: standard locations)
        """
        self._cache_enabled = cache_enabled
        if search_paths is None:
            self._search_paths = get_default_search_paths()
        else:
            self._search_paths = [Path(p) for p in search_paths]
        self._cached: CachedConfig | None = None

    @property
    def search_paths(self) -> list[Path]:
        return list(self._search_paths)

    async def load(self) -> PrtConfig:
        """
        Load and merge every config file that exists.

        Raises:
            ConfigNotFoundError: If none of the search paths exist
            InvalidJsonError: If an existing file is not valid JSON
            ValidationError: If the merged config does not match the schema
        """
        cached = self._cached
        if self._cache_enabled and cached is not None:
            try:
                mtime_ns = (await asyncio.to_thread(os.stat, cached.source_path)).st_mtime_ns
            except OSError as e:
                logger.debug(f"Config cache check failed for {cached.source_path}: {e}")
                mtime_ns = None

            if mtime_ns == cached.mtime_ns:
                logger.debug(f"Config cache hit: {cached.source_path}")
                return cached.config
            self._cached = None

        found: list[tuple[Path, dict[str, Any]]] = []
        for path in self._search_paths:
            data = await self._read_config_file(path)
            if data is not None:
                found.append((path, data))

        if not found:
            raise ConfigNotFoundError(
                CONFIG_FILE_NAME, searched=[str(path) for path in self._search_paths]
            )

        config = validate_config(merge_configs([data for _, data in found]))
        logger.info(
            f"Loaded config from {', '.join(str(path) for path, _ in found)}"
        )

        if self._cache_enabled:
            source = str(found[0][0])
            try:
                mtime_ns = (await asyncio.to_thread(os.stat, source)).st_mtime_ns
            except OSError as e:
                logger.debug(f"Not caching config, stat failed for {source}: {e}")
            else:
                self._cached = CachedConfig(config=config, source_path=source, mtime_ns=mtime_ns)

        return config

    async def reload(self) -> PrtConfig:
        """Drop the cached config and load from disk again."""
        self.invalidate_cache()
        return await self.load()

    def invalidate_cache(self) -> None:
        self._cached = None

    def get_cached_config(self) -> PrtConfig | None:
        return self._cached.config if self._cached is not None else None

    async def _read_config_file(self, path: Path) -> dict[str, Any] | None:
        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise InvalidJsonError(str(path), str(e)) from e

        if not isinstance(data, dict):
            raise ValidationError(
                [
                    ValidationErrorDetail(
                        type="structure",
                        message=f"Config file {path} must contain a JSON object",
                        field="/",
                    )
                ]
            )

        logger.debug(f"Read config file: {path}")
        return data


_default_config_repository: ConfigRepository | None = None


def get_default_config_repository() -> ConfigRepository:
    """Return the process-wide config repository, creating it on first use."""
    global _default_config_repository
    if _default_config_repository is None:
        _default_config_repository = ConfigRepository()
    return _default_config_repository


def reset_default_config_repository() -> None:
    """Forget the process-wide config repository (next get creates a fresh one)."""
    global _default_config_repository
    _default_config_repository = None
