# roadmap_tracker/errors.py
"""
Exception hierarchy for the roadmap tracker.

Every error raised on purpose by this package derives from PrtError and carries:
    - a stable machine-readable ErrorCode
    - a human message
    - a context dict with the details a caller needs to report the problem

Validation failures that should be shown all at once are aggregated into a single
ValidationError holding every ValidationErrorDetail.
"""

import json
import traceback
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes surfaced to the CLI layer."""

    CONFIG_NOT_FOUND = "PRT_FILE_CONFIG_NOT_FOUND"
    ROADMAP_NOT_FOUND = "PRT_FILE_ROADMAP_NOT_FOUND"
    INVALID_JSON = "PRT_FILE_INVALID_JSON"
    TASK_NOT_FOUND = "PRT_TASK_NOT_FOUND"
    TASK_ID_INVALID = "PRT_TASK_ID_INVALID"
    TASK_INVALID = "PRT_TASK_INVALID"
    VALIDATION_FAILED = "PRT_VALIDATION_FAILED"
    CIRCULAR_DEPENDENCY = "PRT_VALIDATION_CIRCULAR_DEPENDENCY"
    UNKNOWN = "PRT_UNKNOWN"


class ExitCode(int, Enum):
    """Process exit codes used by the CLI."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    VALIDATION_ERROR = 2
    NOT_FOUND = 3
    DEPENDENCY_ERROR = 4


@dataclass
class ValidationErrorDetail:
    """A single problem found while validating a config or roadmap."""

    type: str
    message: str
    field: str | None = None
    task_id: str | None = None
    related_task_ids: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


class PrtError(Exception):
    """
    Base exception for all roadmap tracker errors.

    Attributes:
        code: Stable ErrorCode for this failure
        message: Human-readable message
        context: Extra structured details (file paths, task IDs, ...)
    """

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and verbose output."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context,
        }


class ConfigNotFoundError(PrtError):
    """No config file exists in any of the search paths."""

    code = ErrorCode.CONFIG_NOT_FOUND

    def __init__(self, file_path: str = ".prtrc.json", searched: list[str] | None = None) -> None:
        context: dict[str, Any] = {"filePath": file_path}
        if searched:
            context["searched"] = searched
        super().__init__(f"Config file not found: {file_path}", context)


class RoadmapNotFoundError(PrtError, FileNotFoundError):
    """The roadmap file referenced by the config does not exist (still a FileNotFoundError)."""

    code = ErrorCode.ROADMAP_NOT_FOUND

    def __init__(self, file_path: str) -> None:
        super().__init__(f"Roadmap file not found: {file_path}", {"filePath": file_path})


class InvalidJsonError(PrtError, ValueError):
    """A roadmap or config file exists but does not contain valid JSON (still a ValueError)."""

    code = ErrorCode.INVALID_JSON

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(
            f"File {file_path} is not valid JSON: {reason}",
            {"filePath": file_path, "reason": reason},
        )


class TaskNotFoundError(PrtError):
    """No task with the given ID exists in the roadmap."""

    code = ErrorCode.TASK_NOT_FOUND

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}", {"taskId": task_id})


class InvalidTaskIdError(PrtError):
    """A string does not match the task ID format."""

    code = ErrorCode.TASK_ID_INVALID

    def __init__(self, task_id: str) -> None:
        super().__init__(
            f"Task ID {task_id} is not valid. Must match format: [A-Z]-[000-999]",
            {"taskId": task_id},
        )


class InvalidTaskError(PrtError):
    """A task fails field-level validation."""

    code = ErrorCode.TASK_INVALID

    def __init__(self, message: str, task_id: str | None = None, field: str | None = None) -> None:
        context: dict[str, Any] = {}
        if task_id:
            context["taskId"] = task_id
        if field:
            context["validationField"] = field
        super().__init__(message, context)
        self.task_id = task_id
        self.field = field


class ValidationError(PrtError):
    """Validation failed with one or more problems, all reported together."""

    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, errors: list[ValidationErrorDetail]) -> None:
        count = len(errors)
        error_types = list(dict.fromkeys(e.type for e in errors))
        super().__init__(
            f"Validation failed with {count} error{'' if count == 1 else 's'}",
            {
                "errorCount": count,
                "errorTypes": error_types,
                "errors": [e.to_dict() for e in errors],
            },
        )
        self.errors = errors


class CircularDependencyError(PrtError):
    """Tasks cannot be ordered because their dependencies form a cycle."""

    code = ErrorCode.CIRCULAR_DEPENDENCY

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(
            f"Circular dependency detected: {' -> '.join(cycle)}",
            {"cycle": cycle, "cycleLength": len(cycle)},
        )
        self.cycle = cycle


_EXIT_CODES = {
    ErrorCode.CONFIG_NOT_FOUND: ExitCode.NOT_FOUND,
    ErrorCode.ROADMAP_NOT_FOUND: ExitCode.NOT_FOUND,
    ErrorCode.TASK_NOT_FOUND: ExitCode.NOT_FOUND,
    ErrorCode.TASK_ID_INVALID: ExitCode.VALIDATION_ERROR,
    ErrorCode.TASK_INVALID: ExitCode.VALIDATION_ERROR,
    ErrorCode.VALIDATION_FAILED: ExitCode.VALIDATION_ERROR,
    ErrorCode.INVALID_JSON: ExitCode.VALIDATION_ERROR,
    ErrorCode.CIRCULAR_DEPENDENCY: ExitCode.DEPENDENCY_ERROR,
}


def get_exit_code(error: BaseException) -> ExitCode:
    """Map an exception to the CLI exit code (GENERAL_ERROR for foreign errors)."""
    if isinstance(error, PrtError):
        return _EXIT_CODES.get(error.code, ExitCode.GENERAL_ERROR)
    return ExitCode.GENERAL_ERROR


def format_error_message(error: BaseException, verbose: bool = False) -> str:
    """
    Format an exception for display on stderr.

    Args:
        error: The exception to format
        verbose: Include context and traceback

    Returns:
        Multi-line message string
    """
    parts = [f"Error: {error}"]
    if isinstance(error, PrtError):
        parts.append(f"Code: {error.code.value}")
        if verbose and error.context:
            parts.extend(["", "Context:", json.dumps(error.context, indent=2, default=str)])

    if verbose and error.__traceback__ is not None:
        parts.extend(["", "Stack trace:", "".join(traceback.format_exception(error)).rstrip()])

    return "\n".join(parts)
