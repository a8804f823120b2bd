"""Duration-weighted critical path through the acyclic part of the graph.

Paths are returned prerequisite-first: ``[Setup, Build, Test]`` means Build
depends on Setup and Test depends on Build. Cycles make "longest path"
ill-defined, so nodes on a cycle are left out and the path is computed over
what remains.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence

from dependency_engine.cycle_detector import cycle_members, detect_cycles
from dependency_engine.models import DEFAULT_DURATION_MINUTES
from tasks.types import Task

logger = logging.getLogger("tgm.critical_path")


def task_duration(task: Task, default_duration: int = DEFAULT_DURATION_MINUTES) -> int:
    """Estimated minutes for one task, falling back to the default weight."""
    if task.estimated_duration is None or task.estimated_duration <= 0:
        return default_duration
    return task.estimated_duration


def calculate_critical_path(
    tasks: Sequence[Task],
    *,
    default_duration: int = DEFAULT_DURATION_MINUTES,
) -> list[str]:
    """Return the ids of the maximum-duration dependency chain.

    Ties between predecessors keep the dependency declared first; ties between
    terminal nodes keep the task that comes first in the input. Empty input,
    or no dependency edges outside of cycles, gives ``[]``.
    """
    if not tasks:
        return []

    tasks_by_id = {task.id: task for task in tasks}
    adjacency = {task.id: list(task.dependencies) for task in tasks}
    excluded = cycle_members(detect_cycles(adjacency))

    deps: dict[str, list[str]] = {}
    for task in tasks:
        if task.id in excluded:
            continue
        deps[task.id] = [
            dep
            for dep in dict.fromkeys(task.dependencies)
            if dep in tasks_by_id and dep not in excluded
        ]

    order = _topological_order(deps)
    if not any(deps[node_id] for node_id in order):
        logger.debug("Critical path skipped: no acyclic dependency edges")
        return []

    best: dict[str, int] = {}
    predecessor: dict[str, str | None] = {}
    for node_id in order:
        chosen: str | None = None
        chosen_score = 0
        for dep in deps[node_id]:
            if dep in best and (chosen is None or best[dep] > chosen_score):
                chosen = dep
                chosen_score = best[dep]
        best[node_id] = task_duration(tasks_by_id[node_id], default_duration) + chosen_score
        predecessor[node_id] = chosen

    terminal: str | None = None
    for task in tasks:
        if task.id in best and (terminal is None or best[task.id] > best[terminal]):
            terminal = task.id

    path: list[str] = []
    current = terminal
    while current is not None:
        path.append(current)
        current = predecessor[current]
    path.reverse()

    logger.debug(
        "Critical path calculated: length=%d duration=%d excluded=%d",
        len(path),
        best[terminal] if terminal is not None else 0,
        len(excluded),
    )
    return path


def path_duration(
    path: Sequence[str],
    tasks: Sequence[Task],
    default_duration: int = DEFAULT_DURATION_MINUTES,
) -> int:
    """Sum of estimated minutes along ``path``; unknown ids are skipped."""
    tasks_by_id = {task.id: task for task in tasks}
    return sum(
        task_duration(tasks_by_id[task_id], default_duration)
        for task_id in path
        if task_id in tasks_by_id
    )


def _topological_order(deps: dict[str, list[str]]) -> list[str]:
    """Kahn's algorithm; nodes it cannot order are dropped from the result."""
    in_degree = {node_id: len(node_deps) for node_id, node_deps in deps.items()}
    dependents: dict[str, list[str]] = {node_id: [] for node_id in deps}
    for node_id, node_deps in deps.items():
        for dep in node_deps:
            dependents[dep].append(node_id)

    queue = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
    order: list[str] = []
    while queue:
        node_id = queue.popleft()
        order.append(node_id)
        for dependent_id in dependents[node_id]:
            in_degree[dependent_id] -= 1
            if in_degree[dependent_id] == 0:
                queue.append(dependent_id)
    return order
