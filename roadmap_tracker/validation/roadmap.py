# roadmap_tracker/validation/roadmap.py
"""
Whole-roadmap validation and statistics.

validate_roadmap never stops at the first problem: it returns every structure,
task, duplicate-ID and dependency error so they can be shown together.
"""

from dataclasses import dataclass, field

from roadmap_tracker.errors import InvalidTaskError, ValidationErrorDetail
from roadmap_tracker.graph.dependencies import validate_dependencies
from roadmap_tracker.models.roadmap import Roadmap, TaskPriority, TaskStatus, TaskType

from .task import validate_task

# (attribute, JSON key) for required metadata strings
_METADATA_FIELDS = (
    ("name", "name"),
    ("description", "description"),
    ("created_by", "createdBy"),
    ("created_at", "createdAt"),
)


def validate_roadmap(roadmap: Roadmap) -> list[ValidationErrorDetail]:
    """
    Collect every problem in a parsed roadmap.

    Order: structure errors, then per task its validation error and duplicate-ID
    error, then dependency errors (missing references, then the first cycle).

    Returns:
        List of ValidationErrorDetail (empty if the roadmap is valid)
    """
    errors: list[ValidationErrorDetail] = []

    if not roadmap.schema_url:
        errors.append(
            ValidationErrorDetail(
                type="structure",
                message="Roadmap must have a $schema property",
                field="$schema",
            )
        )

    for attr, key in _METADATA_FIELDS:
        if not getattr(roadmap.metadata, attr):
            errors.append(
                ValidationErrorDetail(
                    type="structure",
                    message=f"Roadmap metadata must have a {key}",
                    field=f"metadata.{key}",
                )
            )

    seen: set[str] = set()
    for task in roadmap.tasks:
        try:
            validate_task(task)
        except InvalidTaskError as e:
            errors.append(
                ValidationErrorDetail(type="task", message=e.message, field=e.field, task_id=task.id)
            )

        if task.id in seen:
            errors.append(
                ValidationErrorDetail(
                    type="duplicate-id",
                    message=f"Duplicate task ID: {task.id}",
                    task_id=task.id,
                )
            )
        seen.add(task.id)

    for dep_error in validate_dependencies(roadmap):
        errors.append(
            ValidationErrorDetail(
                type=dep_error.type,
                message=dep_error.message,
                task_id=dep_error.task_id,
                related_task_ids=list(dep_error.related_task_ids),
            )
        )

    return errors


@dataclass
class RoadmapStats:
    """Task counts for a roadmap. Every enum value has a key, even when zero."""

    total_tasks: int = 0
    by_status: dict[str, int] = field(default_factory=lambda: {s.value: 0 for s in TaskStatus})
    by_type: dict[str, int] = field(default_factory=lambda: {t.value: 0 for t in TaskType})
    by_priority: dict[str, int] = field(default_factory=lambda: {p.value: 0 for p in TaskPriority})


def get_stats(roadmap: Roadmap) -> RoadmapStats:
    stats = RoadmapStats(total_tasks=len(roadmap.tasks))
    for task in roadmap.tasks:
        stats.by_status[task.status.value] += 1
        stats.by_type[task.type.value] += 1
        stats.by_priority[task.priority.value] += 1
    return stats
