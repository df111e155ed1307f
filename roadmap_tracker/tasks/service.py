# roadmap_tracker/tasks/service.py
"""
Task creation and roadmap mutations.

Every function that changes a roadmap returns a new Roadmap and leaves its input
untouched, so a failed command never leaves a half-modified document behind.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from roadmap_tracker.errors import TaskNotFoundError
from roadmap_tracker.models.roadmap import (
    TASK_TYPE_LETTERS,
    Roadmap,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from roadmap_tracker.validation.task import validate_task

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2026-01-05T10:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_task(
    *,
    id: str,
    title: str,
    details: str,
    type: TaskType,
    priority: TaskPriority = TaskPriority.MEDIUM,
    status: TaskStatus = TaskStatus.NOT_STARTED,
    depends_on: list[str] | None = None,
    blocks: list[str] | None = None,
    tags: list[str] | None = None,
    notes: str = "",
    passes_tests: bool = False,
) -> Task:
    """
    Build a new task with defaults filled in and both timestamps set to now.

    All default fields are set explicitly so they are written to disk.
    """
    now = utc_timestamp()
    return Task(
        id=id,
        title=title,
        details=details,
        type=type,
        status=status,
        priority=priority,
        depends_on=list(depends_on or []),
        blocks=list(blocks or []),
        tags=list(tags or []),
        notes=notes,
        passes_tests=passes_tests,
        created_at=now,
        updated_at=now,
    )


def add_task(roadmap: Roadmap, task: Task) -> Roadmap:
    """
    Return a copy of roadmap with task appended.

    Raises:
        InvalidTaskError: If the task fails validation
    """
    validate_task(task)
    return roadmap.model_copy(update={"tasks": [*roadmap.tasks, task]})


def find_task(roadmap: Roadmap, task_id: str) -> Task | None:
    for task in roadmap.tasks:
        if task.id == task_id:
            return task
    return None


def generate_next_id(roadmap: Roadmap, task_type: TaskType) -> str:
    """
    Lowest free ID for a task type: F-001 when no feature exists, F-003 if F-001 and
    F-002 are taken, F-002 if only F-001 and F-003 are.
    """
    letter = TASK_TYPE_LETTERS[TaskType(task_type)]
    taken = {task.id for task in roadmap.tasks}

    number = 1
    while f"{letter}-{number:03d}" in taken:
        number += 1
    return f"{letter}-{number:03d}"


def update_task(roadmap: Roadmap, task_id: str, **updates: Any) -> Roadmap:
    """
    Return a copy of roadmap with one task's fields replaced.

    Updates use attribute names (status=..., passes_tests=..., depends_on=...).
    updated_at is always refreshed.

    Raises:
        TaskNotFoundError: If no task has task_id
    """
    for index, task in enumerate(roadmap.tasks):
        if task.id == task_id:
            break
    else:
        raise TaskNotFoundError(task_id)

    updated = task.model_copy(update={**updates, "updated_at": utc_timestamp()})
    logger.debug(f"Updated task {task_id}: {', '.join(sorted(updates)) or 'timestamp only'}")

    tasks = list(roadmap.tasks)
    tasks[index] = updated
    return roadmap.model_copy(update={"tasks": tasks})
