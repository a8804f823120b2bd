"""Dependency analysis payload: summary counts, issues and recommendations."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from dependency_engine.models import BlockedItem, DependencyGraph
from dependency_engine.resolver import DependencyResolver
from tasks.types import HIGH_PRIORITY, Task, TaskList, TaskStatus

logger = logging.getLogger("tgm.analysis")


def find_bottlenecks(graph: DependencyGraph, threshold: int) -> list[str]:
    """Incomplete tasks that at least ``threshold`` other tasks depend on."""
    return [
        node.id
        for node in graph.nodes.values()
        if len(node.dependents) >= threshold and node.status != TaskStatus.COMPLETED
    ]


def analyze_dependencies(
    task_list: TaskList,
    resolver: DependencyResolver | None = None,
) -> dict[str, Any]:
    """Assemble the JSON-ready analysis of one list snapshot."""
    resolver = resolver or DependencyResolver()
    tasks = task_list.tasks
    graph = resolver.build_graph(tasks)
    critical_path = resolver.critical_path(tasks)
    ready = resolver.ready_items(tasks)
    blocked = resolver.blocked_items(tasks)
    bottlenecks = find_bottlenecks(graph, resolver.policy.bottleneck_threshold)

    completed = [t for t in tasks if t.status == TaskStatus.COMPLETED]
    payload = {
        "list_id": task_list.id,
        "summary": {
            "total_tasks": len(tasks),
            "completed_tasks": len(completed),
            "ready_tasks": len(ready),
            "blocked_tasks": len(blocked),
            "tasks_with_dependencies": sum(1 for t in tasks if t.dependencies),
            "critical_path_duration": resolver.critical_path_duration(critical_path, tasks),
        },
        "critical_path": critical_path,
        "structure": {
            "roots": graph.roots,
            "leaves": graph.leaves,
            "suggested_order": [task.id for task in resolver.suggest_order(tasks)],
        },
        "issues": {
            "circular_dependencies": [list(cycle) for cycle in graph.cycles],
            "bottlenecks": bottlenecks,
        },
        "recommendations": build_recommendations(
            tasks, graph, critical_path, ready, blocked, bottlenecks
        ),
    }
    logger.info(
        "Dependency analysis for list %s: tasks=%d ready=%d blocked=%d cycles=%d",
        task_list.id,
        len(tasks),
        len(ready),
        len(blocked),
        len(graph.cycles),
    )
    return payload


def build_recommendations(
    tasks: list[Task],
    graph: DependencyGraph,
    critical_path: list[str],
    ready: list[Task],
    blocked: list[BlockedItem],
    bottlenecks: list[str],
) -> list[str]:
    """Free-text hints for the person or agent working the list."""
    by_id = {task.id: task for task in tasks}
    recommendations: list[str] = []

    open_on_path = [
        by_id[task_id]
        for task_id in critical_path
        if task_id in by_id and by_id[task_id].status != TaskStatus.COMPLETED
    ]
    if open_on_path:
        recommendations.append(
            f'Focus on the critical path: start with "{open_on_path[0].title}", '
            f"{len(critical_path) - 1} other tasks sit on the same chain."
        )

    active = [
        t for t in tasks if t.status not in (TaskStatus.COMPLETED, TaskStatus.CANCELLED)
    ]
    if not ready and active:
        blocker_counts = Counter(
            blocker.id for entry in blocked for blocker in entry.blocked_by
        )
        if blocker_counts:
            top_id, count = blocker_counts.most_common(1)[0]
            recommendations.append(
                f'No tasks are ready. Complete "{by_id[top_id].title}", '
                f"which is blocking {count} other tasks."
            )
        else:
            recommendations.append(
                "No tasks are ready. Check for circular dependencies or review task statuses."
            )
    elif ready:
        high_priority = [t for t in ready if t.priority >= HIGH_PRIORITY]
        if high_priority:
            recommendations.append(
                f'{len(ready)} tasks are ready. Prioritize high-priority tasks like '
                f'"{high_priority[0].title}".'
            )
        else:
            recommendations.append(f"{len(ready)} tasks are ready to work on.")

    if bottlenecks:
        recommendations.append(
            f'Bottleneck: "{by_id[bottlenecks[0]].title}" is blocking multiple tasks. '
            "Consider breaking it down or prioritizing it."
        )

    if graph.cycles:
        recommendations.append(
            f"{len(graph.cycles)} circular dependencies detected. "
            "Break these cycles to unblock progress."
        )

    if tasks:
        progress = round(100 * sum(1 for t in tasks if t.status == TaskStatus.COMPLETED) / len(tasks))
        if progress < 25 and len(tasks) > 5:
            recommendations.append(
                "Project is in early stages. Complete foundational tasks to unlock more work."
            )
        elif progress > 75:
            recommendations.append(
                "Project is nearing completion. Finish the remaining tasks and final reviews."
            )
    return recommendations


QUICK_TASK_MINUTES = 30


def ready_task_report(
    task_list: TaskList,
    resolver: DependencyResolver | None = None,
    limit: int | None = None,
) -> dict[str, Any]:
    """Actionable ready tasks, highest priority then oldest first, with next-step hints.

    Cancelled tasks are ready in the engine's sense but never actionable, so
    they are left out here. ``total_ready`` counts before ``limit`` is applied.
    """
    resolver = resolver or DependencyResolver()
    tasks = task_list.tasks
    actionable = [
        task for task in resolver.ready_items(tasks) if task.status != TaskStatus.CANCELLED
    ]
    ordered = sorted(actionable, key=lambda task: (-task.priority, task.created_at))
    shown = ordered[:limit] if limit else ordered
    ready_ids = {task.id for task in actionable}
    incomplete = [
        task for task in tasks if task.status not in (TaskStatus.COMPLETED, TaskStatus.CANCELLED)
    ]
    blocked = [task for task in incomplete if task.dependencies and task.id not in ready_ids]

    return {
        "list_id": task_list.id,
        "tasks": shown,
        "total_ready": len(actionable),
        "next_actions": _next_actions(tasks, shown, incomplete, blocked),
        "summary": {
            "total_tasks": len(tasks),
            "completed_tasks": sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
            "ready_tasks": len(actionable),
            "blocked_tasks": len(blocked),
        },
    }


def _next_actions(
    tasks: list[Task],
    shown: list[Task],
    incomplete: list[Task],
    blocked: list[Task],
) -> list[str]:
    actions: list[str] = []
    in_progress = sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS)
    in_progress_hint = (
        f"{in_progress} tasks are in progress. Consider completing them before starting new ones."
    )

    if not shown:
        if not incomplete:
            actions.append(
                "All tasks are completed! Consider adding new tasks or archiving this list."
            )
            return actions
        if blocked:
            actions.append(
                f"{len(blocked)} tasks are blocked by dependencies. "
                "Focus on completing prerequisite tasks."
            )
        if in_progress:
            actions.append(in_progress_hint)
        return actions

    high_priority = [t for t in shown if t.priority >= HIGH_PRIORITY]
    if high_priority:
        actions.append(f'Start with high-priority tasks: "{high_priority[0].title}"')
    else:
        actions.append(f'Begin with: "{shown[0].title}"')
    if len(shown) > 1:
        actions.append(
            f"{len(shown)} tasks are ready to work on. Focus on one at a time for best results."
        )
    if in_progress:
        actions.append(in_progress_hint)
    quick = [
        t for t in shown
        if t.estimated_duration is not None and t.estimated_duration <= QUICK_TASK_MINUTES
    ]
    if quick:
        actions.append(
            f"{len(quick)} quick tasks (<= {QUICK_TASK_MINUTES} min) "
            "available for filling small time slots."
        )
    return actions
