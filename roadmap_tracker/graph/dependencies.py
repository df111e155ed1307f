# roadmap_tracker/graph/dependencies.py
"""Dependency graph construction, cycle detection and ordering for roadmap tasks.

Every function here is pure: it reads the tasks it is given, never mutates them, and
recomputes its answer from scratch on each call. Nothing suspends or performs I/O,
so these are safe to call from anywhere.

Edge semantics
- `depends-on: [B]` on task A means B must finish before A can start.
- `blocks: [B]` on task A means A prevents B from proceeding.
- The two lists are independent. A `blocks` edge is not required to have a matching
  `depends-on` edge on the other task (and vice versa), and neither direction is
  derived from the other.

Which edges each operation uses
- Cycle detection walks `depends-on` and `blocks` edges as one directed graph, so a
  cycle may mix both kinds.
- Topological ordering uses `depends-on` edges only.

Determinism
- DFS roots are visited in task order; each task's `depends-on` targets are followed
  before its `blocks` targets, each in list order. Only the first cycle found is
  reported; fixing it and re-running may reveal the next one.
- Topological ties are broken by original input order.
- IDs that do not belong to any task are leaves: they never start a cycle and are
  ignored for ordering. Reporting them is `validate_dependencies`' job.
"""

from __future__ import annotations

import heapq
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from roadmap_tracker.errors import CircularDependencyError
from roadmap_tracker.models.roadmap import Roadmap, Task


@dataclass(frozen=True)
class DependencyGraph:
    """Adjacency lists keyed by every task ID (tasks without edges map to [])."""

    depends_on: dict[str, list[str]]
    blocks: dict[str, list[str]]


@dataclass(frozen=True)
class CircularDependency:
    """A detected cycle. `cycle` starts and ends with the same task ID."""

    cycle: list[str]
    message: str


@dataclass
class DependencyValidationError:
    """A problem with task relations found by `validate_dependencies`."""

    type: str  # "missing-task" | "circular" | "invalid-reference"
    message: str
    task_id: str | None = None
    related_task_ids: list[str] = field(default_factory=list)


def build_graph(tasks: Iterable[Task]) -> DependencyGraph:
    """Record each task's `depends-on` and `blocks` lists under its own ID.

    Lists are copied verbatim: no deduplication and no filtering of IDs that do not
    exist.
    """
    depends_on: dict[str, list[str]] = {}
    blocks: dict[str, list[str]] = {}
    for task in tasks:
        depends_on[task.id] = list(task.depends_on)
        blocks[task.id] = list(task.blocks)
    return DependencyGraph(depends_on=depends_on, blocks=blocks)


def detect_circular(tasks: Iterable[Task]) -> CircularDependency | None:
    """Return the first cycle reachable through `depends-on`/`blocks` edges, or None.

    The cycle is the DFS path from the first occurrence of the repeated task through
    the current task, with the repeated task appended again: a self-loop reports
    `[A, A]`, a two-task loop `[A, B, A]`.
    """
    adjacency: dict[str, list[str]] = {}
    for task in tasks:
        edges = adjacency.setdefault(task.id, [])
        edges.extend(task.depends_on)
        edges.extend(task.blocks)

    cycle = _find_cycle(adjacency, adjacency.keys())
    if cycle is None:
        return None
    return CircularDependency(cycle=cycle, message=_cycle_message(cycle))


def validate_dependencies(roadmap: Roadmap) -> list[DependencyValidationError]:
    """Collect every relation problem in the roadmap.

    Emits one `missing-task` error per reference to a task that does not exist, in
    task order (`depends-on` misses before `blocks` misses within a task), then at
    most one `circular` error for the first cycle found. Asymmetric
    `depends-on`/`blocks` pairs are valid and produce no error.
    """
    errors: list[DependencyValidationError] = []
    task_ids = {task.id for task in roadmap.tasks}

    for task in roadmap.tasks:
        for dep_id in task.depends_on:
            if dep_id not in task_ids:
                errors.append(
                    DependencyValidationError(
                        type="missing-task",
                        message=f"Task {task.id} depends on non-existent task {dep_id}",
                        task_id=task.id,
                        related_task_ids=[dep_id],
                    )
                )
        for blocked_id in task.blocks:
            if blocked_id not in task_ids:
                errors.append(
                    DependencyValidationError(
                        type="missing-task",
                        message=f"Task {task.id} blocks non-existent task {blocked_id}",
                        task_id=task.id,
                        related_task_ids=[blocked_id],
                    )
                )

    circular = detect_circular(roadmap.tasks)
    if circular is not None:
        errors.append(
            DependencyValidationError(
                type="circular",
                message=circular.message,
                task_id=circular.cycle[0],
                related_task_ids=list(circular.cycle),
            )
        )

    return errors


def topological_sort(tasks: Sequence[Task]) -> list[Task]:
    """Return a new list where every task comes after the tasks it depends on.

    Kahn's algorithm over `depends-on` edges; among tasks that are ready at the same
    time, the one earliest in the input goes first. The input list and its tasks are
    left untouched.

    Raises:
        CircularDependencyError: If the `depends-on` edges contain a cycle
    """
    ordered_input = list(tasks)
    indexes_by_id: dict[str, list[int]] = {}
    for index, task in enumerate(ordered_input):
        indexes_by_id.setdefault(task.id, []).append(index)

    pending = [0] * len(ordered_input)
    dependents: list[list[int]] = [[] for _ in ordered_input]
    for index, task in enumerate(ordered_input):
        for dep_id in dict.fromkeys(task.depends_on):
            for dep_index in indexes_by_id.get(dep_id, ()):
                pending[index] += 1
                dependents[dep_index].append(index)

    ready = [index for index, count in enumerate(pending) if count == 0]
    heapq.heapify(ready)

    result: list[Task] = []
    while ready:
        index = heapq.heappop(ready)
        result.append(ordered_input[index])
        for dependent in dependents[index]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, dependent)

    if len(result) < len(ordered_input):
        stuck = [task for index, task in enumerate(ordered_input) if pending[index] > 0]
        stuck_ids = {task.id for task in stuck}
        adjacency: dict[str, list[str]] = {}
        for task in stuck:
            adjacency.setdefault(task.id, []).extend(d for d in task.depends_on if d in stuck_ids)
        cycle = _find_cycle(adjacency, adjacency.keys()) or list(adjacency)
        raise CircularDependencyError(cycle)

    return result


def get_blocked_tasks(task: Task, all_tasks: Iterable[Task]) -> list[Task]:
    """Tasks whose `depends-on` list contains `task.id` (looked up via depends-on, not blocks)."""
    return [other for other in all_tasks if task.id in other.depends_on]


def get_depends_on_tasks(task: Task, all_tasks: Iterable[Task]) -> list[Task]:
    """Tasks named in `task.depends_on`, in that list's order. Unknown IDs are skipped."""
    by_id = {other.id: other for other in all_tasks}
    return [by_id[dep_id] for dep_id in task.depends_on if dep_id in by_id]


def _cycle_message(cycle: list[str]) -> str:
    return f"Circular dependency detected: {' -> '.join(cycle)}"


def _find_cycle(adjacency: dict[str, list[str]], roots: Iterable[str]) -> list[str] | None:
    # Iterative DFS so long dependency chains cannot hit the recursion limit.
    visited: set[str] = set()
    for root in roots:
        if root in visited:
            continue
        visited.add(root)
        path = [root]
        position = {root: 0}
        stack = [iter(adjacency.get(root, ()))]

        while stack:
            for neighbor in stack[-1]:
                if neighbor in position:
                    return path[position[neighbor]:] + [neighbor]
                if neighbor in visited:
                    continue
                visited.add(neighbor)
                position[neighbor] = len(path)
                path.append(neighbor)
                stack.append(iter(adjacency.get(neighbor, ())))
                break
            else:
                stack.pop()
                del position[path.pop()]

    return None
