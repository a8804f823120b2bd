"""Stateless facade bundling the engine operations with a caller policy.

Every call takes a full snapshot and returns freshly built results, so one
resolver can be shared across threads and needs no teardown.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from dependency_engine.critical_path import calculate_critical_path, path_duration
from dependency_engine.graph_builder import build_dependency_graph
from dependency_engine.models import (
    BlockedItem,
    DependencyGraph,
    DependencyPolicy,
    DependencyValidationResult,
)
from dependency_engine.ordering import suggest_task_order
from dependency_engine.readiness import get_blocked_items, get_ready_items
from dependency_engine.validator import validate_dependencies
from tasks.types import Task


@dataclass(frozen=True)
class DependencyResolver:
    """Engine entry point used by the task-list manager and analysis tools."""

    policy: DependencyPolicy = field(default_factory=DependencyPolicy)

    def build_graph(self, tasks: Sequence[Task]) -> DependencyGraph:
        return build_dependency_graph(tasks)

    def validate(
        self,
        task_id: str,
        proposed_ids: Sequence[str],
        all_tasks: Sequence[Task],
    ) -> DependencyValidationResult:
        return validate_dependencies(task_id, proposed_ids, all_tasks, self.policy)

    def critical_path(self, tasks: Sequence[Task]) -> list[str]:
        return calculate_critical_path(tasks, default_duration=self.policy.default_duration)

    def critical_path_duration(self, path: Sequence[str], tasks: Sequence[Task]) -> int:
        return path_duration(path, tasks, self.policy.default_duration)

    def ready_items(self, tasks: Sequence[Task]) -> list[Task]:
        return get_ready_items(tasks)

    def blocked_items(self, tasks: Sequence[Task]) -> list[BlockedItem]:
        return get_blocked_items(tasks)

    def suggest_order(self, tasks: Sequence[Task]) -> list[Task]:
        return suggest_task_order(tasks)
