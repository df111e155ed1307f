"""Task operations: creation, mutation and queries."""

from .query import SORT_FIELDS, SortField, filter_tasks, search_tasks, sort_tasks
from .service import (
    add_task,
    create_task,
    find_task,
    generate_next_id,
    update_task,
    utc_timestamp,
)

__all__ = [
    "create_task",
    "add_task",
    "find_task",
    "generate_next_id",
    "update_task",
    "utc_timestamp",
    "filter_tasks",
    "search_tasks",
    "sort_tasks",
    "SortField",
    "SORT_FIELDS",
]
