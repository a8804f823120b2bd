"""Build a dependency graph from a task snapshot."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence

from dependency_engine.cycle_detector import detect_cycles
from dependency_engine.models import DependencyGraph, DependencyNode
from tasks.types import Task, TaskStatus

logger = logging.getLogger("tgm.graph_builder")


def build_dependency_graph(
    tasks: Sequence[Task],
    *,
    with_cycles: bool = True,
) -> DependencyGraph:
    """Convert tasks into nodes with reverse edges, readiness and cycles.

    Dangling dependency ids stay on the node and count as unsatisfied; the
    builder never drops or rejects them. Duplicate task ids are a caller error.
    """
    nodes: dict[str, DependencyNode] = {}
    for task in tasks:
        nodes[task.id] = DependencyNode(
            id=task.id,
            title=task.title,
            status=task.status,
            dependencies=list(task.dependencies),
        )

    # Single pass for reverse edges; dict keys keep first-seen order per dependent.
    dependents: dict[str, dict[str, None]] = {}
    for task in tasks:
        for dep_id in task.dependencies:
            if dep_id in nodes:
                dependents.setdefault(dep_id, {})[task.id] = None
    for node_id, node in nodes.items():
        node.dependents = list(dependents.get(node_id, {}))

    _mark_readiness(nodes)
    _assign_depths(nodes)

    graph = DependencyGraph(nodes=nodes)
    if with_cycles:
        graph.cycles = detect_cycles(graph.adjacency())

    logger.debug(
        "Dependency graph built: nodes=%d cycles=%d ready=%d",
        len(nodes),
        len(graph.cycles),
        sum(1 for node in nodes.values() if node.is_ready),
    )
    return graph


def _mark_readiness(nodes: dict[str, DependencyNode]) -> None:
    for node in nodes.values():
        if node.status == TaskStatus.COMPLETED:
            node.is_ready = False
            node.blocked_by = []
            continue
        blocked_by = []
        for dep_id in node.dependencies:
            dep = nodes.get(dep_id)
            if dep is None or dep.status != TaskStatus.COMPLETED:
                blocked_by.append(dep_id)
        node.blocked_by = blocked_by
        node.is_ready = not blocked_by


def _assign_depths(nodes: dict[str, DependencyNode]) -> None:
    """Longest prerequisite chain below each node, ignoring cyclic back edges."""
    present_deps = {
        node_id: list(dict.fromkeys(d for d in node.dependencies if d in nodes))
        for node_id, node in nodes.items()
    }
    in_degree = {node_id: len(deps) for node_id, deps in present_deps.items()}
    queue = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
    resolved: set[str] = set()

    while queue:
        node_id = queue.popleft()
        resolved.add(node_id)
        deps = present_deps[node_id]
        nodes[node_id].depth = max((nodes[d].depth + 1 for d in deps), default=0)
        for dependent_id in nodes[node_id].dependents:
            in_degree[dependent_id] -= 1
            if in_degree[dependent_id] == 0:
                queue.append(dependent_id)

    # Nodes on or behind a cycle only count their resolved prerequisites.
    for node_id, deps in present_deps.items():
        if node_id in resolved:
            continue
        nodes[node_id].depth = max(
            (nodes[d].depth + 1 for d in deps if d in resolved), default=0
        )
