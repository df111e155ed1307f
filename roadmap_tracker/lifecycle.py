# roadmap_tracker/lifecycle.py
"""
Per-invocation application context.

Owns the config repository and the roadmap repository built from the loaded
config, and tears them down when the command finishes.
"""

import logging

from roadmap_tracker.config.loader import ConfigRepository
from roadmap_tracker.config.schema import PrtConfig
from roadmap_tracker.models.repository import RoadmapRepository
from roadmap_tracker.models.roadmap import Roadmap

logger = logging.getLogger(__name__)


class AppContext:
    """
    Dependency container handed to every CLI command.

    Manages:
        - Config resolution (once per context)
        - Roadmap repository creation from the config's cache settings
        - Disposal of file watchers on close
    """

    def __init__(
        self,
        config_repository: ConfigRepository | None = None,
        roadmap_repository: RoadmapRepository | None = None,
    ) -> None:
        """
        Initialize context.

        Args:
            config_repository: Config source (default: standard search paths)
            roadmap_repository: Roadmap store (default: built from the loaded config)
        """
        self._config_repository = config_repository or ConfigRepository()
        self._roadmap_repository = roadmap_repository
        self._config: PrtConfig | None = None

    @property
    def config_repository(self) -> ConfigRepository:
        return self._config_repository

    async def load_config(self) -> PrtConfig:
        if self._config is None:
            self._config = await self._config_repository.load()
        return self._config

    async def roadmap_repository(self) -> RoadmapRepository:
        if self._roadmap_repository is None:
            config = await self.load_config()
            self._roadmap_repository = RoadmapRepository.from_config(config)
            logger.debug(
                f"Created roadmap repository (cache={self._roadmap_repository.cache_enabled}, "
                f"max_size={self._roadmap_repository.max_cache_size})"
            )
        return self._roadmap_repository

    async def roadmap_path(self) -> str:
        return (await self.load_config()).path

    async def load_roadmap(self) -> Roadmap:
        repository = await self.roadmap_repository()
        return await repository.load(await self.roadmap_path())

    async def save_roadmap(self, roadmap: Roadmap) -> None:
        repository = await self.roadmap_repository()
        await repository.save(await self.roadmap_path(), roadmap)

    async def close(self) -> None:
        """Dispose the roadmap repository (stops any watchers)."""
        if self._roadmap_repository is not None:
            await self._roadmap_repository.dispose()
