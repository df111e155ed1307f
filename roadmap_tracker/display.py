# roadmap_tracker/display.py
"""
Text formatting for CLI output.

Formatters return lists of plain lines so commands decide where they go and tests
can assert on them directly. Statistics and validation reports are printed through rich.
"""

from rich.console import Console
from rich.table import Table

from roadmap_tracker.errors import ValidationErrorDetail
from roadmap_tracker.models.roadmap import Task, TaskPriority, TaskStatus, TaskType
from roadmap_tracker.validation.roadmap import RoadmapStats

STATUS_SYMBOLS = {
    TaskStatus.COMPLETED: "✓",
    TaskStatus.IN_PROGRESS: "~",
    TaskStatus.NOT_STARTED: "○",
}

PRIORITY_SYMBOLS = {
    TaskPriority.HIGH: "H",
    TaskPriority.MEDIUM: "M",
    TaskPriority.LOW: "L",
}

_ERROR_PREFIXES = {
    "circular": "❌",
    "missing-task": "❌",
    "duplicate-id": "❌",
    "invalid-reference": "⚠️ ",
}


def format_status_text(status: TaskStatus) -> str:
    """'in-progress' -> 'In Progress'."""
    return " ".join(word.capitalize() for word in status.value.split("-"))


def format_test_status(passing: bool) -> str:
    return "✓" if passing else "✗"


def format_task_summary(task: Task) -> list[str]:
    lines = [
        f"{STATUS_SYMBOLS[task.status]} [{PRIORITY_SYMBOLS[task.priority]}] [{task.id}] {task.title}",
        f"   Type: {task.type.value} | Tests: {format_test_status(task.passes_tests)} "
        f"| Deps: {len(task.depends_on)}",
    ]
    if task.depends_on:
        lines.append(f"   Depends on: {', '.join(task.depends_on)}")
    lines.append("")
    return lines


def format_task_list(tasks: list[Task]) -> list[str]:
    lines = ["", f"Tasks ({len(tasks)} total):", ""]
    for task in tasks:
        lines.extend(format_task_summary(task))
    return lines


def format_task_details(task: Task) -> list[str]:
    """Full view of one task, optional fields only when set."""
    lines = [
        "",
        f"Task: {task.id}",
        "",
        f"Title: {task.title}",
        f"Type: {task.type.value}",
        f"Priority: {task.priority.value.capitalize()}",
        f"Status: {STATUS_SYMBOLS[task.status]} {format_status_text(task.status)} "
        f"| {format_test_status(task.passes_tests)} Tests Passing",
        "",
        "Details:",
        task.details,
        "",
        f"Depends On: {', '.join(task.depends_on) if task.depends_on else 'None'}",
    ]
    if task.blocks:
        lines.append(f"Blocks: {', '.join(task.blocks)}")

    lines.extend(["", f"Created: {task.created_at or '-'}", f"Updated: {task.updated_at or '-'}"])

    if task.tags:
        lines.extend(["", f"Tags: {', '.join(task.tags)}"])
    if task.assigned_to:
        lines.append(f"Assigned To: {task.assigned_to}")
    if task.due_date:
        lines.append(f"Due: {task.due_date}")
    if task.effort is not None:
        lines.append(f"Effort: {task.effort}")
    if task.github_refs:
        lines.append(f"GitHub Refs: {', '.join(task.github_refs)}")
    if task.notes:
        lines.extend(["", "Notes:", task.notes])

    lines.append("")
    return lines


def format_validation_errors(errors: list[ValidationErrorDetail]) -> list[str]:
    noun = "error" if len(errors) == 1 else "errors"
    lines = ["", f"Found {len(errors)} validation {noun}:", ""]
    for error in errors:
        prefix = _ERROR_PREFIXES.get(error.type, "❌")
        if error.type == "circular":
            lines.extend([f"{prefix} CIRCULAR DEPENDENCY DETECTED", f"   {error.message}", ""])
            continue
        owner = f"[{error.task_id}] " if error.type == "task" and error.task_id else ""
        where = f" ({error.field})" if error.field and error.type in ("structure", "task") else ""
        lines.append(f"{prefix} {owner}{error.message}{where}")
    return lines


def print_validation_errors(errors: list[ValidationErrorDetail], console: Console | None = None) -> None:
    """Render a validation report on stdout, headline in bold and problems in red."""
    console = console or Console()
    for line in format_validation_errors(errors):
        style = "bold" if line.startswith("Found ") else "red" if line else None
        console.print(line, style=style, markup=False, highlight=False, soft_wrap=True)


def format_order(tasks: list[Task]) -> list[str]:
    width = len(str(len(tasks)))
    return [
        f"{index:>{width}}. {STATUS_SYMBOLS[task.status]} [{task.id}] {task.title}"
        for index, task in enumerate(tasks, start=1)
    ]


def print_stats(stats: RoadmapStats, console: Console | None = None) -> None:
    """Render task counts as a table on stdout."""
    console = console or Console()

    table = Table(title=f"Roadmap Statistics ({stats.total_tasks} tasks)", show_header=True)
    table.add_column("Group", style="bold")
    table.add_column("Value")
    table.add_column("Tasks", justify="right")

    for status in TaskStatus:
        table.add_row("Status", format_status_text(status), str(stats.by_status[status.value]))
    table.add_section()
    for task_type in TaskType:
        table.add_row("Type", task_type.value, str(stats.by_type[task_type.value]))
    table.add_section()
    for priority in TaskPriority:
        table.add_row("Priority", priority.value, str(stats.by_priority[priority.value]))

    console.print(table)
