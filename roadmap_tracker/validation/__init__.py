"""Task and roadmap validation."""

from .roadmap import RoadmapStats, get_stats, validate_roadmap
from .task import validate_task, validate_task_id

__all__ = [
    "validate_task_id",
    "validate_task",
    "validate_roadmap",
    "get_stats",
    "RoadmapStats",
]
