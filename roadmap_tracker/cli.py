# roadmap_tracker/cli.py
"""
CLI interface for the roadmap tracker (`prt`).

Thin presentation layer: each command builds an AppContext, calls the task,
validation and graph functions, and prints the result. Errors are reported on
stderr with a stable exit code.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import Any

import typer

from roadmap_tracker.config.loader import CONFIG_FILE_NAME
from roadmap_tracker.config.schema import CONFIG_SCHEMA_URL
from roadmap_tracker.display import (
    format_order,
    format_task_details,
    format_task_list,
    print_stats,
    print_validation_errors,
)
from roadmap_tracker.errors import (
    ExitCode,
    TaskNotFoundError,
    ValidationError,
    format_error_message,
    get_exit_code,
)
from roadmap_tracker.graph.dependencies import topological_sort
from roadmap_tracker.lifecycle import AppContext
from roadmap_tracker.logging_config import configure_logging
from roadmap_tracker.models.repository import RoadmapRepository
from roadmap_tracker.models.roadmap import (
    ROADMAP_SCHEMA_URL,
    Roadmap,
    RoadmapMetadata,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from roadmap_tracker.tasks.query import SORT_FIELDS, filter_tasks, sort_tasks
from roadmap_tracker.tasks.service import (
    add_task,
    create_task,
    find_task,
    generate_next_id,
    update_task,
    utc_timestamp,
)
from roadmap_tracker.validation.roadmap import get_stats, validate_roadmap
from roadmap_tracker.validation.task import validate_task_id

app = typer.Typer(
    name="prt",
    help="Track project roadmap tasks and their dependencies in a JSON file.",
    no_args_is_help=True,
)

ROADMAP_FILE_NAME = "prt.json"

_options = {"verbose": False}


class PassesTestsChoice(str, Enum):
    TRUE = "true"
    FALSE = "false"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and full error details"),
    log_json: bool = typer.Option(False, "--log-json", help="Log to stderr as JSON lines"),
):
    """Project roadmap tracker."""
    _options["verbose"] = verbose
    configure_logging(verbose=verbose, json_format=log_json)


def _run(coro):
    """Run async function from sync CLI context."""
    return asyncio.run(coro)


def _execute(handler: Callable[[AppContext], Awaitable[Any]]) -> Any:
    """Run handler with a fresh AppContext, turning errors into stderr output and an exit code."""

    async def _main():
        ctx = AppContext()
        try:
            return await handler(ctx)
        finally:
            await ctx.close()

    try:
        return _run(_main())
    except Exception as e:
        typer.echo(format_error_message(e, verbose=_options["verbose"]), err=True)
        raise typer.Exit(int(get_exit_code(e)))


def _split_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@app.command()
def init(
    folder: str = typer.Argument(".", help="Folder to create prt.json in"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing files"),
):
    """Create .prtrc.json in the current directory and an empty roadmap in FOLDER."""
    config_path = Path.cwd() / CONFIG_FILE_NAME
    folder_path = Path(folder)
    roadmap_path = folder_path / ROADMAP_FILE_NAME

    if not force:
        existing = [str(p) for p in (config_path, roadmap_path) if p.exists()]
        if existing:
            typer.echo(
                f"Error: {', '.join(existing)} already exist(s). Use --force to overwrite.", err=True
            )
            raise typer.Exit(int(ExitCode.GENERAL_ERROR))

    if not folder_path.exists():
        typer.echo(f"Target directory does not exist, creating: {folder}")
        folder_path.mkdir(parents=True, exist_ok=True)

    config = {
        "$schema": CONFIG_SCHEMA_URL,
        "path": f"{folder.rstrip('/') or '.'}/{ROADMAP_FILE_NAME}",
    }
    config_path.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")

    project_dir = (Path.cwd() if folder == "." else folder_path).resolve()
    roadmap = Roadmap(
        schema_url=ROADMAP_SCHEMA_URL,
        metadata=RoadmapMetadata(
            name=project_dir.name or "roadmap",
            description="Project roadmap",
            created_by="prt",
            created_at=utc_timestamp(),
        ),
        tasks=[],
    )

    async def _init():
        repository = RoadmapRepository(watch_files=False)
        try:
            await repository.save(roadmap_path, roadmap)
        finally:
            await repository.dispose()

    _run(_init())
    typer.echo(f"Project roadmap initialized: {roadmap_path}")


@app.command()
def add(
    title: str = typer.Argument(..., help="Title of the task"),
    task_type: TaskType = typer.Option(..., "--type", "-t", help="Task type"),
    details: str = typer.Option(..., "--details", "-d", help="Description of the task"),
    priority: TaskPriority = typer.Option(TaskPriority.MEDIUM, "--priority", "-p", help="Priority"),
    status: TaskStatus = typer.Option(TaskStatus.NOT_STARTED, "--status", "-s", help="Initial status"),
    tags: str = typer.Option(None, "--tags", "-g", help="Comma-separated tags"),
):
    """Add a new task to the roadmap."""

    async def _add(ctx: AppContext):
        roadmap = await ctx.load_roadmap()
        task = create_task(
            id=generate_next_id(roadmap, task_type),
            title=title,
            details=details,
            type=task_type,
            priority=priority,
            status=status,
            tags=_split_list(tags),
        )
        await ctx.save_roadmap(add_task(roadmap, task))
        return task

    task = _execute(_add)
    typer.echo(f"Added task {task.id}: {task.title}")


@app.command("list")
def list_tasks(
    status: TaskStatus = typer.Option(None, "--status", "-s", help="Only tasks with this status"),
    priority: TaskPriority = typer.Option(None, "--priority", "-p", help="Only tasks with this priority"),
    incomplete: bool = typer.Option(False, "--incomplete", "-i", help="Only not-started and in-progress tasks"),
    sort: str = typer.Option(None, "--sort", "-o", help=f"Sort by: {', '.join(SORT_FIELDS)}"),
):
    """List roadmap tasks."""
    if sort is not None and sort not in SORT_FIELDS:
        raise typer.BadParameter(f"must be one of {', '.join(SORT_FIELDS)}", param_hint="--sort")

    # --status wins over --incomplete
    if status is not None:
        statuses = [status]
    elif incomplete:
        statuses = [TaskStatus.NOT_STARTED, TaskStatus.IN_PROGRESS]
    else:
        statuses = None

    async def _list(ctx: AppContext):
        roadmap = await ctx.load_roadmap()
        tasks = filter_tasks(roadmap.tasks, status=statuses, priority=priority)
        if sort:
            tasks = sort_tasks(tasks, sort)
        return tasks

    tasks = _execute(_list)
    for line in format_task_list(tasks):
        typer.echo(line)


@app.command()
def show(task_id: str = typer.Argument(..., help="Task ID to show, e.g. F-001")):
    """Show the details of one task."""

    async def _show(ctx: AppContext):
        validate_task_id(task_id)
        roadmap = await ctx.load_roadmap()
        task = find_task(roadmap, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    task = _execute(_show)
    for line in format_task_details(task):
        typer.echo(line)


@app.command()
def update(
    task_id: str = typer.Argument(..., help="Task ID to update"),
    status: TaskStatus = typer.Option(None, "--status", "-s", help="New status"),
    tested: PassesTestsChoice = typer.Option(None, "--tested", "-t", help="Whether the task passes tests"),
    deps: str = typer.Option(None, "--deps", "-d", help="Comma-separated task IDs this task depends on"),
    notes: str = typer.Option(None, "--notes", "-n", help="Append a line to the task notes"),
    clear_notes: bool = typer.Option(False, "--clear-notes", help="Remove existing notes first"),
):
    """Update a task in place."""

    async def _update(ctx: AppContext):
        validate_task_id(task_id)
        roadmap = await ctx.load_roadmap()
        task = find_task(roadmap, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        updates: dict[str, Any] = {}
        if clear_notes:
            updates["notes"] = ""
        if notes:
            existing = "" if clear_notes or not task.notes else task.notes + "\n"
            updates["notes"] = existing + notes
        if status is not None:
            updates["status"] = status
        if tested is not None:
            updates["passes_tests"] = tested == PassesTestsChoice.TRUE
        if deps is not None:
            dep_ids = _split_list(deps)
            for dep_id in dep_ids:
                validate_task_id(dep_id)
            updates["depends_on"] = dep_ids

        await ctx.save_roadmap(update_task(roadmap, task_id, **updates))

    _execute(_update)
    typer.echo(f"Task {task_id} has been updated.")


@app.command()
def complete(
    task_id: str = typer.Argument(..., help="Task ID to complete"),
    tests: bool = typer.Option(False, "--tests", "-t", help="Also mark the task as passing tests"),
):
    """Mark a task as completed."""

    async def _complete(ctx: AppContext):
        roadmap = await ctx.load_roadmap()
        updates: dict[str, Any] = {"status": TaskStatus.COMPLETED}
        if tests:
            updates["passes_tests"] = True
        await ctx.save_roadmap(update_task(roadmap, task_id, **updates))

    _execute(_complete)
    typer.echo(f"Task {task_id} marked as completed.")


@app.command("pass-test")
def pass_test(task_id: str = typer.Argument(..., help="Task ID that now passes its tests")):
    """Mark a task as passing tests."""

    async def _pass_test(ctx: AppContext):
        roadmap = await ctx.load_roadmap()
        await ctx.save_roadmap(update_task(roadmap, task_id, passes_tests=True))

    _execute(_pass_test)
    typer.echo(f"Task {task_id} marked as passing tests.")


@app.command()
def validate():
    """Validate roadmap structure, task data and dependencies."""

    async def _validate(ctx: AppContext):
        try:
            roadmap = await ctx.load_roadmap()
        except ValidationError as e:
            # schema violations stop the load before the roadmap checks can run
            print_validation_errors(e.errors)
            raise
        errors = validate_roadmap(roadmap)
        if errors:
            print_validation_errors(errors)
            raise ValidationError(errors)
        return roadmap

    roadmap = _execute(_validate)
    typer.echo(f"Roadmap is valid ({len(roadmap.tasks)} tasks).")


@app.command()
def order():
    """Print tasks in dependency order (dependencies first)."""

    async def _order(ctx: AppContext):
        roadmap = await ctx.load_roadmap()
        return topological_sort(roadmap.tasks)

    for line in format_order(_execute(_order)):
        typer.echo(line)


@app.command()
def stats():
    """Show task counts by status, type and priority."""

    async def _stats(ctx: AppContext):
        return get_stats(await ctx.load_roadmap())

    print_stats(_execute(_stats))
