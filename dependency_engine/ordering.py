"""Suggested work order for a task snapshot."""

from __future__ import annotations

from collections.abc import Sequence

from dependency_engine.graph_builder import build_dependency_graph
from tasks.types import Task


def suggest_task_order(tasks: Sequence[Task]) -> list[Task]:
    """Topological order, preferring deeper then higher-priority tasks.

    Among tasks whose prerequisites are all placed, the one with the greatest
    depth goes first, then the higher priority, then input order. Tasks that
    never become available (on or behind a cycle) are appended in input order.
    """
    graph = build_dependency_graph(tasks, with_cycles=False)
    position = {task.id: index for index, task in enumerate(tasks)}
    tasks_by_id = {task.id: task for task in tasks}

    remaining = {
        task.id: {dep for dep in task.dependencies if dep in tasks_by_id}
        for task in tasks
    }
    placed: set[str] = set()
    ordered: list[Task] = []
    available = [task_id for task_id, deps in remaining.items() if not deps]

    def sort_key(task_id: str) -> tuple[int, int, int]:
        return (-graph.nodes[task_id].depth, -tasks_by_id[task_id].priority, position[task_id])

    while available:
        available.sort(key=sort_key)
        current = available.pop(0)
        placed.add(current)
        ordered.append(tasks_by_id[current])
        for dependent_id in graph.nodes[current].dependents:
            if dependent_id in placed or dependent_id in available:
                continue
            if remaining[dependent_id] <= placed:
                available.append(dependent_id)

    ordered.extend(task for task in tasks if task.id not in placed)
    return ordered
