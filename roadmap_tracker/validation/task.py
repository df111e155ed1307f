# roadmap_tracker/validation/task.py
"""Field-level checks for task IDs and individual tasks."""

from roadmap_tracker.errors import InvalidTaskError, InvalidTaskIdError
from roadmap_tracker.models.roadmap import TASK_ID_PATTERN, Task


def validate_task_id(task_id: str) -> None:
    """
    Check that a string is a well-formed task ID (e.g. F-001).

    Raises:
        InvalidTaskIdError: If it does not match TASK_ID_PATTERN
    """
    if not isinstance(task_id, str) or not TASK_ID_PATTERN.fullmatch(task_id):
        raise InvalidTaskIdError(str(task_id))


def validate_task(task: Task, skip_id: bool = False) -> None:
    """
    Check a task before it is added to or saved in a roadmap.

    Type, status and priority are already enforced by the Task model; this covers
    what the model accepts but the roadmap does not.

    Args:
        task: Task to check
        skip_id: Don't check the ID (used before an ID has been assigned)

    Raises:
        InvalidTaskError: On the first problem found
    """
    if not skip_id and not TASK_ID_PATTERN.fullmatch(task.id):
        raise InvalidTaskError(
            f"Task ID {task.id} is not valid. Must match format: [A-Z]-[000-999]",
            task_id=task.id,
            field="id",
        )

    task_id = None if skip_id else task.id
    label = "Task" if skip_id else f"Task {task.id}"

    if not task.details:
        raise InvalidTaskError(f"{label} must have details", task_id=task_id, field="details")
