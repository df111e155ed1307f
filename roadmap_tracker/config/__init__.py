# roadmap_tracker/config/__init__.py
"""Configuration system for the roadmap tracker."""

from .loader import (
    CONFIG_FILE_NAME,
    ConfigRepository,
    get_default_config_repository,
    get_default_search_paths,
    merge_configs,
    reset_default_config_repository,
)
from .schema import CONFIG_SCHEMA_URL, CacheConfig, MetadataConfig, PrtConfig, validate_config

__all__ = [
    "PrtConfig",
    "CacheConfig",
    "MetadataConfig",
    "CONFIG_SCHEMA_URL",
    "CONFIG_FILE_NAME",
    "ConfigRepository",
    "validate_config",
    "merge_configs",
    "get_default_search_paths",
    "get_default_config_repository",
    "reset_default_config_repository",
]
