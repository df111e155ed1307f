# tests/unit/test_errors.py
"""Unit tests for the error hierarchy, exit codes and error formatting."""

import json

import pytest

from roadmap_tracker.errors import (
    CircularDependencyError,
    ConfigNotFoundError,
    ErrorCode,
    ExitCode,
    InvalidJsonError,
    InvalidTaskError,
    InvalidTaskIdError,
    PrtError,
    RoadmapNotFoundError,
    TaskNotFoundError,
    ValidationError,
    ValidationErrorDetail,
    format_error_message,
    get_exit_code,
)


@pytest.mark.parametrize(
    "error, code, exit_code",
    [
        (ConfigNotFoundError(), ErrorCode.CONFIG_NOT_FOUND, ExitCode.NOT_FOUND),
        (RoadmapNotFoundError("prt.json"), ErrorCode.ROADMAP_NOT_FOUND, ExitCode.NOT_FOUND),
        (TaskNotFoundError("F-001"), ErrorCode.TASK_NOT_FOUND, ExitCode.NOT_FOUND),
        (InvalidTaskIdError("x"), ErrorCode.TASK_ID_INVALID, ExitCode.VALIDATION_ERROR),
        (InvalidTaskError("bad"), ErrorCode.TASK_INVALID, ExitCode.VALIDATION_ERROR),
        (ValidationError([]), ErrorCode.VALIDATION_FAILED, ExitCode.VALIDATION_ERROR),
        (InvalidJsonError("a.json", "oops"), ErrorCode.INVALID_JSON, ExitCode.VALIDATION_ERROR),
        (CircularDependencyError(["A", "B", "A"]), ErrorCode.CIRCULAR_DEPENDENCY, ExitCode.DEPENDENCY_ERROR),
    ],
)
def test_codes_and_exit_codes(error, code, exit_code):
    assert isinstance(error, PrtError)
    assert error.code == code
    assert get_exit_code(error) == exit_code


def test_foreign_errors_are_general():
    assert get_exit_code(RuntimeError("boom")) == ExitCode.GENERAL_ERROR
    assert get_exit_code(PermissionError("denied")) == ExitCode.GENERAL_ERROR


def test_disk_errors_keep_builtin_types():
    not_found = RoadmapNotFoundError("prt.json")
    assert isinstance(not_found, FileNotFoundError)
    assert str(not_found) == "Roadmap file not found: prt.json"
    assert isinstance(InvalidJsonError("a.json", "oops"), ValueError)


def test_validation_error_aggregates_details():
    details = [
        ValidationErrorDetail(type="task", message="bad status", task_id="F-001"),
        ValidationErrorDetail(type="structure", message="missing $schema", field="$schema"),
        ValidationErrorDetail(type="task", message="bad type", task_id="F-002"),
    ]

    error = ValidationError(details)

    assert error.message == "Validation failed with 3 errors"
    assert error.errors == details
    assert error.context["errorCount"] == 3
    assert error.context["errorTypes"] == ["task", "structure"]
    assert error.context["errors"][1] == {"type": "structure", "message": "missing $schema", "field": "$schema"}
    assert ValidationError(details[:1]).message == "Validation failed with 1 error"


def test_circular_dependency_error():
    error = CircularDependencyError(["F-001", "F-002", "F-001"])

    assert str(error) == "Circular dependency detected: F-001 -> F-002 -> F-001"
    assert error.cycle == ["F-001", "F-002", "F-001"]
    assert error.to_dict()["code"] == "PRT_VALIDATION_CIRCULAR_DEPENDENCY"


def test_format_error_message_plain():
    message = format_error_message(TaskNotFoundError("F-404"))

    assert message == "Error: Task not found: F-404\nCode: PRT_TASK_NOT_FOUND"


def test_format_error_message_verbose():
    try:
        raise InvalidJsonError("prt.json", "Expecting value")
    except InvalidJsonError as e:
        message = format_error_message(e, verbose=True)

    assert "Context:" in message
    context_json = message.split("Context:\n", 1)[1].split("\n\nStack trace:", 1)[0]
    assert json.loads(context_json) == {"filePath": "prt.json", "reason": "Expecting value"}
    assert "Stack trace:" in message
    assert "test_format_error_message_verbose" in message


def test_format_foreign_error():
    assert format_error_message(RuntimeError("boom")) == "Error: boom"
