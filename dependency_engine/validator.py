"""Strict gate for proposed dependency changes.

The validator simulates ``task_id -> proposed_ids`` on a hypothetical
adjacency and never touches the caller's tasks. Problems come back as a
result object; nothing here raises for a well-formed snapshot.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence

from dependency_engine.cycle_detector import detect_cycles
from dependency_engine.models import DependencyPolicy, DependencyValidationResult
from tasks.types import Task, TaskStatus

logger = logging.getLogger("tgm.dependency_validator")


def validate_dependencies(
    task_id: str,
    proposed_ids: Sequence[str],
    all_tasks: Sequence[Task],
    policy: DependencyPolicy | None = None,
) -> DependencyValidationResult:
    """Check a full replacement dependency set for ``task_id``.

    Errors are appended in a fixed order (self-dependency, missing ids,
    duplicates, cycles) so the most structural problem is reported first.
    Warnings never affect ``is_valid``.
    """
    policy = policy or DependencyPolicy()
    result = DependencyValidationResult()
    proposed = list(proposed_ids)
    tasks_by_id = {task.id: task for task in all_tasks}
    unique = list(dict.fromkeys(proposed))

    if task_id in unique:
        result.errors.append(f"Self-dependency: task {task_id} cannot depend on itself")

    missing = [dep for dep in unique if dep not in tasks_by_id and dep != task_id]
    if missing:
        result.errors.append(f"Invalid dependencies: {', '.join(missing)} do not exist")

    duplicates = [dep for dep, count in Counter(proposed).items() if count > 1]
    if duplicates:
        result.errors.append(f"Duplicate dependencies: {', '.join(duplicates)}")

    adjacency = {task.id: list(task.dependencies) for task in all_tasks}
    adjacency[task_id] = unique
    cycles = [
        cycle
        for cycle in detect_cycles(adjacency, roots=[task_id])
        if task_id in cycle and cycle != [task_id]
    ]
    if cycles:
        result.circular_dependencies = cycles
        chains = ", ".join(" -> ".join([*cycle, cycle[0]]) for cycle in cycles)
        result.errors.append(f"Circular dependency detected: {chains}")

    existing = [dep for dep in unique if dep in tasks_by_id and dep != task_id]
    result.warnings.extend(_redundancy_warnings(task_id, existing, adjacency))

    if policy.max_dependencies is not None and len(unique) > policy.max_dependencies:
        result.warnings.append(
            f"Task has {len(unique)} dependencies, more than the recommended "
            f"maximum of {policy.max_dependencies}"
        )

    completed = [
        tasks_by_id[dep].title
        for dep in existing
        if tasks_by_id[dep].status == TaskStatus.COMPLETED
    ]
    if completed:
        result.warnings.append(f"Dependencies on completed tasks: {', '.join(completed)}")

    logger.debug(
        "Validated dependencies for %s: valid=%s errors=%d warnings=%d",
        task_id,
        result.is_valid,
        len(result.errors),
        len(result.warnings),
    )
    return result


def _redundancy_warnings(
    task_id: str,
    dependency_ids: list[str],
    adjacency: dict[str, list[str]],
) -> list[str]:
    """Flag proposed ids already reachable through another proposed id."""
    warnings: list[str] = []
    reach = {dep: _reachable(dep, adjacency, stop_at=task_id) for dep in dependency_ids}
    for dep in dependency_ids:
        for other in dependency_ids:
            if other != dep and dep in reach[other]:
                warnings.append(
                    f"Redundant dependency: {dep} is already reachable through {other}"
                )
                break
    return warnings


def _reachable(start: str, adjacency: dict[str, list[str]], stop_at: str) -> set[str]:
    seen: set[str] = set()
    stack = list(adjacency.get(start, []))
    while stack:
        current = stack.pop()
        if current in seen or current == stop_at:
            continue
        seen.add(current)
        stack.extend(adjacency.get(current, []))
    return seen
