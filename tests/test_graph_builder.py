"""Dependency graph builder tests."""

from __future__ import annotations

from dependency_engine.graph_builder import build_dependency_graph
from tasks.types import Task, TaskStatus


def task(
    task_id: str,
    deps: list[str] | None = None,
    status: TaskStatus = TaskStatus.PENDING,
) -> Task:
    return Task(id=task_id, title=task_id.title(), dependencies=deps or [], status=status)


def sample_tasks() -> list[Task]:
    return [
        task("setup"),
        task("build", ["setup"]),
        task("test", ["build"]),
        task("docs", ["setup"]),
    ]


def test_graph_has_one_node_per_task_in_input_order() -> None:
    graph = build_dependency_graph(sample_tasks())

    assert list(graph.nodes) == ["setup", "build", "test", "docs"]
    assert graph.nodes["build"].title == "Build"
    assert graph.nodes["build"].dependencies == ["setup"]
    assert graph.cycles == []


def test_dependents_are_the_transpose_of_dependencies() -> None:
    tasks = sample_tasks()
    graph = build_dependency_graph(tasks)

    for a in tasks:
        for b in tasks:
            assert (b.id in a.dependencies) == (a.id in graph.nodes[b.id].dependents)
    assert graph.nodes["setup"].dependents == ["build", "docs"]
    assert graph.nodes["test"].dependents == []


def test_build_is_deterministic() -> None:
    tasks = [task("a", ["b"]), task("b", ["c", "a"]), task("c", ["a"])]

    first = build_dependency_graph(tasks)
    second = build_dependency_graph(tasks)

    assert first == second
    assert first.cycles == second.cycles


def test_readiness_follows_prerequisite_status() -> None:
    tasks = [
        task("setup", status=TaskStatus.COMPLETED),
        task("build", ["setup"]),
        task("test", ["build"]),
        task("docs", ["setup"], status=TaskStatus.COMPLETED),
    ]
    graph = build_dependency_graph(tasks)

    statuses = {t.id: t.status for t in tasks}
    for t in tasks:
        expected = t.status != TaskStatus.COMPLETED and all(
            statuses.get(dep) == TaskStatus.COMPLETED for dep in t.dependencies
        )
        assert graph.nodes[t.id].is_ready is expected

    assert graph.ready_ids == ["build"]
    assert graph.blocked_ids == ["test"]
    assert graph.nodes["test"].blocked_by == ["build"]
    assert graph.nodes["setup"].blocked_by == []


def test_dangling_dependency_counts_as_unsatisfied() -> None:
    tasks = [task("a", status=TaskStatus.COMPLETED), task("b", ["a", "ghost"])]
    graph = build_dependency_graph(tasks)

    node = graph.nodes["b"]
    assert node.dependencies == ["a", "ghost"]
    assert node.blocked_by == ["ghost"]
    assert node.is_ready is False
    assert "ghost" not in graph.nodes


def test_roots_leaves_and_depth() -> None:
    graph = build_dependency_graph(sample_tasks())

    assert graph.roots == ["setup"]
    assert graph.leaves == ["test", "docs"]
    assert graph.nodes["setup"].depth == 0
    assert graph.nodes["docs"].depth == 1
    assert graph.nodes["test"].depth == 2


def test_cycle_detection_can_be_skipped() -> None:
    tasks = [task("a", ["b"]), task("b", ["a"])]

    assert build_dependency_graph(tasks).cycles == [["a", "b"]]
    assert build_dependency_graph(tasks, with_cycles=False).cycles == []


def test_empty_snapshot_builds_empty_graph() -> None:
    graph = build_dependency_graph([])

    assert graph.nodes == {}
    assert graph.cycles == []
    assert graph.roots == []
