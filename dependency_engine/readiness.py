"""Ready / blocked projections over a freshly built graph.

These are called often by interactive tooling, so they build the graph once
without cycle detection and never compute a critical path.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from dependency_engine.graph_builder import build_dependency_graph
from dependency_engine.models import BlockedItem
from tasks.types import Task, TaskStatus

logger = logging.getLogger("tgm.readiness")


def get_ready_items(tasks: Sequence[Task]) -> list[Task]:
    """Tasks with no incomplete prerequisite, in input order."""
    graph = build_dependency_graph(tasks, with_cycles=False)
    ready = [task for task in tasks if graph.nodes[task.id].is_ready]
    logger.debug("Ready items: %d of %d", len(ready), len(tasks))
    return ready


def get_blocked_items(tasks: Sequence[Task]) -> list[BlockedItem]:
    """Incomplete, not-ready tasks paired with the tasks blocking them."""
    graph = build_dependency_graph(tasks, with_cycles=False)
    tasks_by_id = {task.id: task for task in tasks}
    blocked: list[BlockedItem] = []
    for task in tasks:
        node = graph.nodes[task.id]
        if node.is_ready or node.status == TaskStatus.COMPLETED:
            continue
        blockers = [tasks_by_id[dep] for dep in node.blocked_by if dep in tasks_by_id]
        blocked.append(BlockedItem(item=task, blocked_by=blockers))
    logger.debug("Blocked items: %d of %d", len(blocked), len(tasks))
    return blocked
