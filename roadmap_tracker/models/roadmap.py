# roadmap_tracker/models/roadmap.py
"""
Pydantic models for the roadmap document (prt.json).

Field aliases keep the on-disk JSON keys (`depends-on`, `passes-tests`, `createdAt`, ...)
while Python code uses snake_case attributes. Unknown keys are preserved so a
load/save cycle never drops data written by other tools.
"""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from roadmap_tracker.errors import ValidationError, ValidationErrorDetail

ROADMAP_SCHEMA_URL = "https://project-roadmap-tracking.com/schemas/roadmap/v1.json"

TASK_ID_PATTERN = re.compile(r"^[A-Z]-[0-9]{3}$")


class TaskType(str, Enum):
    """Kind of work a task represents."""

    BUG = "bug"
    FEATURE = "feature"
    IMPROVEMENT = "improvement"
    PLANNING = "planning"
    RESEARCH = "research"


class TaskStatus(str, Enum):
    """Task lifecycle states."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Task priority levels."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ID letter for each task type (F-001 is a feature, B-001 a bug, ...)
TASK_TYPE_LETTERS: dict[TaskType, str] = {
    TaskType.BUG: "B",
    TaskType.FEATURE: "F",
    TaskType.IMPROVEMENT: "I",
    TaskType.PLANNING: "P",
    TaskType.RESEARCH: "R",
}


class Task(BaseModel):
    """A single unit of work in the roadmap."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., description="Task ID, e.g. F-001")
    title: str = Field(..., description="Short task title")
    details: str = Field(..., description="Longer description of the work")
    type: TaskType = Field(..., description="Task type")
    status: TaskStatus = Field(..., description="Current status")
    priority: TaskPriority = Field(..., description="Priority level")

    depends_on: list[str] = Field(
        default_factory=list,
        alias="depends-on",
        description="IDs of tasks that must finish before this one starts",
    )
    blocks: list[str] = Field(
        default_factory=list,
        description="IDs of tasks this task prevents from proceeding",
    )

    tags: list[str] = Field(default_factory=list)
    notes: str | None = None
    assigned_to: str | None = Field(default=None, alias="assignedTo")
    due_date: str | None = Field(default=None, alias="dueDate")
    effort: int | float | None = None
    github_refs: list[str] = Field(default_factory=list, alias="github-refs")
    passes_tests: bool = Field(default=False, alias="passes-tests")
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class RoadmapMetadata(BaseModel):
    """Descriptive metadata stored at the top of the roadmap."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    description: str
    created_by: str = Field(..., alias="createdBy")
    created_at: str = Field(..., alias="createdAt")


class Roadmap(BaseModel):
    """The whole roadmap document. Task order is insertion order."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    schema_url: str = Field(..., alias="$schema")
    metadata: RoadmapMetadata
    tasks: list[Task] = Field(...)


def parse_roadmap(data: Any) -> Roadmap:
    """
    Build a Roadmap from decoded JSON.

    Every schema violation is collected into a single ValidationError. Problems
    located inside the tasks array are reported with type "task" and the offending
    task's ID when it can be read; everything else is "structure".

    Raises:
        ValidationError: If the document does not match the roadmap model
    """
    try:
        return Roadmap.model_validate(data)
    except PydanticValidationError as e:
        raw_tasks = data.get("tasks") if isinstance(data, dict) else None
        details = []
        for err in e.errors():
            loc = err["loc"]
            field = ".".join(str(part) for part in loc) or None
            if len(loc) >= 2 and loc[0] == "tasks" and isinstance(loc[1], int):
                task_id = None
                if isinstance(raw_tasks, list) and isinstance(raw_tasks[loc[1]], dict):
                    task_id = raw_tasks[loc[1]].get("id")
                details.append(
                    ValidationErrorDetail(
                        type="task",
                        message=err["msg"],
                        field=field,
                        task_id=task_id if isinstance(task_id, str) else None,
                    )
                )
            else:
                details.append(ValidationErrorDetail(type="structure", message=err["msg"], field=field))
        raise ValidationError(details) from e


def dump_roadmap(roadmap: Roadmap) -> dict[str, Any]:
    """
    Serialize a Roadmap back to its JSON form.

    Only keys that were present on load (or explicitly set afterwards) are written,
    so an unmodified document round-trips unchanged.
    """
    return roadmap.model_dump(mode="json", by_alias=True, exclude_unset=True)
