# roadmap_tracker/tasks/query.py
"""Filtering, searching and sorting task lists. All functions return new lists."""

from collections.abc import Callable, Iterable, Sequence
from typing import Any, Literal

from roadmap_tracker.models.roadmap import Task, TaskPriority, TaskStatus, TaskType

SortField = Literal[
    "createdAt", "dueDate", "effort", "priority", "status", "title", "type", "updatedAt"
]

PRIORITY_RANK = {TaskPriority.HIGH: 0, TaskPriority.MEDIUM: 1, TaskPriority.LOW: 2}
STATUS_RANK = {TaskStatus.NOT_STARTED: 0, TaskStatus.IN_PROGRESS: 1, TaskStatus.COMPLETED: 2}

# Sort key per field; None means "missing" and always sorts last.
_SORT_KEYS: dict[str, Callable[[Task], Any]] = {
    "createdAt": lambda task: task.created_at or None,
    "dueDate": lambda task: task.due_date or None,
    "effort": lambda task: task.effort,
    "priority": lambda task: PRIORITY_RANK[task.priority],
    "status": lambda task: STATUS_RANK[task.status],
    "title": lambda task: task.title.lower(),
    "type": lambda task: task.type.value,
    "updatedAt": lambda task: task.updated_at or None,
}

SORT_FIELDS: tuple[str, ...] = tuple(_SORT_KEYS)


def filter_tasks(
    tasks: Iterable[Task],
    *,
    status: TaskStatus | Sequence[TaskStatus] | None = None,
    type: TaskType | None = None,
    priority: TaskPriority | None = None,
    assigned_to: str | None = None,
    tags: Sequence[str] | None = None,
    has_blocks: bool | None = None,
    has_dependencies: bool | None = None,
) -> list[Task]:
    """
    Keep tasks matching every given criterion (None means "don't filter").

    Args:
        status: One status, or a list of accepted statuses
        tags: Task must carry all of these tags
        has_blocks: Whether the task's blocks list is non-empty
        has_dependencies: Whether the task's depends-on list is non-empty
    """
    if status is not None and isinstance(status, (str, TaskStatus)):
        statuses = {TaskStatus(status)}
    elif status is not None:
        statuses = {TaskStatus(s) for s in status}
    else:
        statuses = None

    result = []
    for task in tasks:
        if statuses is not None and task.status not in statuses:
            continue
        if type is not None and task.type != type:
            continue
        if priority is not None and task.priority != priority:
            continue
        if assigned_to is not None and task.assigned_to != assigned_to:
            continue
        if tags and not all(tag in task.tags for tag in tags):
            continue
        if has_blocks is not None and bool(task.blocks) != has_blocks:
            continue
        if has_dependencies is not None and bool(task.depends_on) != has_dependencies:
            continue
        result.append(task)
    return result


def search_tasks(tasks: Iterable[Task], query: str) -> list[Task]:
    """Case-insensitive substring search over title and details. Blank query matches all."""
    if not query or not query.strip():
        return list(tasks)

    needle = query.lower()
    return [task for task in tasks if needle in task.title.lower() or needle in task.details.lower()]


def sort_tasks(tasks: Iterable[Task], field: SortField, descending: bool = False) -> list[Task]:
    """
    Sort tasks by one field. Stable; tasks missing the field keep their order at the end.

    Priority sorts high before low and status not-started before completed when
    ascending.

    Raises:
        ValueError: If field is not one of SORT_FIELDS
    """
    try:
        key = _SORT_KEYS[field]
    except KeyError:
        raise ValueError(f"Cannot sort by {field!r}; expected one of {', '.join(SORT_FIELDS)}") from None

    present: list[Task] = []
    missing: list[Task] = []
    for task in tasks:
        (missing if key(task) is None else present).append(task)

    present.sort(key=key, reverse=descending)
    return present + missing
