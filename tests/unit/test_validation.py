# tests/unit/test_validation.py
"""Unit tests for task ID/task validation, roadmap validation and stats."""

import pytest

from roadmap_tracker.errors import InvalidTaskError, InvalidTaskIdError, ValidationError
from roadmap_tracker.models import ROADMAP_SCHEMA_URL, Roadmap, Task, parse_roadmap
from roadmap_tracker.validation import get_stats, validate_roadmap, validate_task, validate_task_id


def _task_dict(task_id: str = "F-001", **fields) -> dict:
    data = {
        "id": task_id,
        "title": f"Task {task_id}",
        "details": "Some work",
        "type": "feature",
        "status": "not-started",
        "priority": "medium",
        "depends-on": [],
        "blocks": [],
    }
    data.update(fields)
    return data


def _roadmap(*tasks: dict, **metadata) -> Roadmap:
    meta = {"name": "Test", "description": "Test roadmap", "createdBy": "tester", "createdAt": "2026-01-01"}
    meta.update(metadata)
    return parse_roadmap({"$schema": ROADMAP_SCHEMA_URL, "metadata": meta, "tasks": list(tasks)})


# ---------------------------------------------------------------------------
# Task IDs and tasks
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("task_id", ["F-001", "B-999", "Z-000"])
def test_valid_task_ids(task_id):
    validate_task_id(task_id)


@pytest.mark.parametrize("task_id", ["f-001", "F-01", "F-0001", "F001", "FF-001", "", " F-001", "F-001\n"])
def test_invalid_task_ids(task_id):
    with pytest.raises(InvalidTaskIdError, match="not valid"):
        validate_task_id(task_id)


def test_validate_task_bad_id():
    with pytest.raises(InvalidTaskError) as exc_info:
        validate_task(Task.model_validate(_task_dict("feature-1")))

    assert exc_info.value.field == "id"
    assert exc_info.value.task_id == "feature-1"


def test_validate_task_skip_id():
    task = Task.model_validate(_task_dict("pending", details=""))

    with pytest.raises(InvalidTaskError) as exc_info:
        validate_task(task, skip_id=True)

    assert exc_info.value.field == "details"
    assert exc_info.value.task_id is None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def test_parse_collects_all_errors():
    with pytest.raises(ValidationError) as exc_info:
        parse_roadmap({
            "metadata": {"name": "x"},
            "tasks": [_task_dict("F-001", priority="urgent"), _task_dict("F-002", type="epic")],
        })

    errors = exc_info.value.errors
    assert {e.type for e in errors} == {"structure", "task"}
    assert {e.task_id for e in errors if e.type == "task"} == {"F-001", "F-002"}
    assert any(e.field == "$schema" for e in errors)
    assert "Validation failed with" in str(exc_info.value)


def test_parse_rejects_non_object():
    with pytest.raises(ValidationError):
        parse_roadmap(["not", "a", "roadmap"])


# ---------------------------------------------------------------------------
# validate_roadmap
# ---------------------------------------------------------------------------

def test_valid_roadmap_has_no_errors():
    roadmap = _roadmap(_task_dict("F-001"), _task_dict("F-002", **{"depends-on": ["F-001"]}))
    assert validate_roadmap(roadmap) == []


def test_empty_roadmap_is_valid():
    assert validate_roadmap(_roadmap()) == []


def test_collects_every_kind_of_error():
    roadmap = _roadmap(
        _task_dict("F-001", details=""),
        _task_dict("F-001"),
        _task_dict("F-002", **{"depends-on": ["F-404", "F-003"]}),
        _task_dict("F-003", blocks=["F-002"]),
        name="",
    )

    errors = validate_roadmap(roadmap)

    assert [e.type for e in errors] == ["structure", "task", "duplicate-id", "missing-task", "circular"]
    assert errors[0].message == "Roadmap metadata must have a name"
    assert errors[1].task_id == "F-001"
    assert errors[2].message == "Duplicate task ID: F-001"
    assert errors[3].message == "Task F-002 depends on non-existent task F-404"
    assert errors[4].message == "Circular dependency detected: F-002 -> F-003 -> F-002"


def test_duplicate_reported_per_repeat():
    roadmap = _roadmap(_task_dict("F-001"), _task_dict("F-001"), _task_dict("F-001"))

    errors = validate_roadmap(roadmap)

    assert [e.type for e in errors] == ["duplicate-id", "duplicate-id"]


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

def test_get_stats():
    roadmap = _roadmap(
        _task_dict("F-001", status="completed", priority="high"),
        _task_dict("B-001", type="bug"),
        _task_dict("B-002", type="bug", status="in-progress"),
    )

    stats = get_stats(roadmap)

    assert stats.total_tasks == 3
    assert stats.by_status == {"not-started": 1, "in-progress": 1, "completed": 1}
    assert stats.by_type["bug"] == 2
    assert stats.by_type["research"] == 0
    assert stats.by_priority == {"high": 1, "medium": 2, "low": 0}


def test_dependency_errors_keep_related_ids():
    roadmap = _roadmap(
        _task_dict("F-001", **{"depends-on": ["F-002"]}),
        _task_dict("F-002", **{"depends-on": ["F-001", "F-404"]}),
    )

    errors = validate_roadmap(roadmap)

    missing = next(e for e in errors if e.type == "missing-task")
    circular = next(e for e in errors if e.type == "circular")
    assert missing.task_id == "F-002"
    assert missing.related_task_ids == ["F-404"]
    assert circular.related_task_ids == ["F-001", "F-002", "F-001"]
    assert circular.to_dict()["related_task_ids"] == ["F-001", "F-002", "F-001"]
