"""Task dependency graph: construction, cycle detection, validation and ordering."""

from .dependencies import (
    CircularDependency,
    DependencyGraph,
    DependencyValidationError,
    build_graph,
    detect_circular,
    get_blocked_tasks,
    get_depends_on_tasks,
    topological_sort,
    validate_dependencies,
)

__all__ = [
    "DependencyGraph",
    "CircularDependency",
    "DependencyValidationError",
    "build_graph",
    "detect_circular",
    "validate_dependencies",
    "topological_sort",
    "get_blocked_tasks",
    "get_depends_on_tasks",
]
