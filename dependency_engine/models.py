"""Engine-owned graph structures, rebuilt on every call."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tasks.types import Task, TaskStatus

DEFAULT_DURATION_MINUTES = 60


@dataclass(frozen=True)
class DependencyPolicy:
    """Caller-supplied thresholds; the engine reports, the caller decides."""

    max_dependencies: int | None = None
    default_duration: int = DEFAULT_DURATION_MINUTES
    bottleneck_threshold: int = 3


@dataclass
class DependencyNode:
    """One task inside a built graph."""

    id: str
    title: str
    status: TaskStatus
    dependencies: list[str] = field(default_factory=list)
    dependents: list[str] = field(default_factory=list)
    depth: int = 0
    is_ready: bool = False
    blocked_by: list[str] = field(default_factory=list)


@dataclass
class DependencyGraph:
    """Point-in-time dependency view of one task snapshot."""

    nodes: dict[str, DependencyNode] = field(default_factory=dict)
    cycles: list[list[str]] = field(default_factory=list)

    @property
    def roots(self) -> list[str]:
        """Nodes with no declared dependencies."""
        return [node.id for node in self.nodes.values() if not node.dependencies]

    @property
    def leaves(self) -> list[str]:
        """Nodes nothing depends on."""
        return [node.id for node in self.nodes.values() if not node.dependents]

    @property
    def ready_ids(self) -> list[str]:
        return [node.id for node in self.nodes.values() if node.is_ready]

    @property
    def blocked_ids(self) -> list[str]:
        return [
            node.id
            for node in self.nodes.values()
            if not node.is_ready and node.status != TaskStatus.COMPLETED
        ]

    def adjacency(self) -> dict[str, list[str]]:
        """Dependency adjacency keyed in node order."""
        return {node_id: list(node.dependencies) for node_id, node in self.nodes.items()}


@dataclass
class DependencyValidationResult:
    """Outcome of checking a proposed dependency set; never raised."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    circular_dependencies: list[list[str]] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "circular_dependencies": [list(c) for c in self.circular_dependencies],
        }


@dataclass
class BlockedItem:
    """A task that cannot start yet and the tasks holding it back."""

    item: Task
    blocked_by: list[Task] = field(default_factory=list)
