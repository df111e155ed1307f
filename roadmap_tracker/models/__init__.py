# roadmap_tracker/models/__init__.py
"""
Data models for the roadmap tracker.

Provides the Pydantic roadmap/task models and the caching roadmap repository.
"""

from roadmap_tracker.models.repository import (
    CacheEntry,
    RoadmapRepository,
    get_default_repository,
    reset_default_repository,
)
from roadmap_tracker.models.roadmap import (
    ROADMAP_SCHEMA_URL,
    TASK_ID_PATTERN,
    TASK_TYPE_LETTERS,
    Roadmap,
    RoadmapMetadata,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
    dump_roadmap,
    parse_roadmap,
)

__all__ = [
    # Roadmap document
    "Roadmap",
    "RoadmapMetadata",
    "Task",
    "TaskType",
    "TaskStatus",
    "TaskPriority",
    "TASK_TYPE_LETTERS",
    "TASK_ID_PATTERN",
    "ROADMAP_SCHEMA_URL",
    "parse_roadmap",
    "dump_roadmap",
    # Repository
    "RoadmapRepository",
    "CacheEntry",
    "get_default_repository",
    "reset_default_repository",
]
