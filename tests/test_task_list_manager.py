"""Task list service tests over SQLite."""

from __future__ import annotations

from pathlib import Path

import pytest

from dependency_engine.models import DependencyPolicy
from dependency_engine.resolver import DependencyResolver
from tasks.errors import DependencyValidationError, TaskListNotFoundError, TaskNotFoundError
from tasks.stores.sql_store import SQLStore
from tasks.task_list_manager import TaskListManager
from tasks.types import TaskStatus


def build_manager(tmp_path: Path, policy: DependencyPolicy | None = None) -> TaskListManager:
    store = SQLStore(db_path=tmp_path / "tasks.db")
    store.create_all()
    resolver = DependencyResolver(policy=policy or DependencyPolicy())
    return TaskListManager(sql_store=store, resolver=resolver)


def test_list_and_task_crud(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release", description="v1")
    setup = manager.add_task(task_list.id, "Setup", estimated_duration=60, tags=["infra"])
    build = manager.add_task(task_list.id, "Build", dependencies=[setup.id])

    loaded = manager.get_list(task_list.id)
    assert loaded.title == "Release"
    assert [t.title for t in loaded.tasks] == ["Setup", "Build"]
    assert loaded.tasks[0].tags == ["infra"]
    assert loaded.tasks[1].dependencies == [setup.id]

    updated = manager.update_task(task_list.id, build.id, priority=5, title="Compile")
    assert updated.priority == 5
    assert updated.title == "Compile"

    assert [item.id for item in manager.list_lists()] == [task_list.id]
    manager.delete_list(task_list.id)
    with pytest.raises(TaskListNotFoundError):
        manager.get_list(task_list.id)


def test_update_rejects_dependency_and_unknown_fields(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")
    setup = manager.add_task(task_list.id, "Setup")

    with pytest.raises(ValueError):
        manager.update_task(task_list.id, setup.id, dependencies=[])
    with pytest.raises(ValueError):
        manager.update_task(task_list.id, setup.id, priority=9)


def test_complete_task_unblocks_dependents(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")
    setup = manager.add_task(task_list.id, "Setup")
    build = manager.add_task(task_list.id, "Build", dependencies=[setup.id])

    assert [t.id for t in manager.get_ready_tasks(task_list.id)] == [setup.id]
    blocked = manager.get_blocked_tasks(task_list.id)
    assert [entry.item.id for entry in blocked] == [build.id]

    done = manager.complete_task(task_list.id, setup.id)
    assert done.status == TaskStatus.COMPLETED
    assert done.completed_at is not None
    assert [t.id for t in manager.get_ready_tasks(task_list.id)] == [build.id]
    assert manager.get_blocked_tasks(task_list.id) == []


def test_add_task_rejects_missing_dependency(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")

    with pytest.raises(DependencyValidationError) as excinfo:
        manager.add_task(task_list.id, "Build", dependencies=["ghost"])

    assert excinfo.value.code == "INVALID_DEPENDENCY_ERROR"
    assert manager.get_list(task_list.id).tasks == []


def test_set_dependencies_rejects_cycles_and_keeps_old_edges(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")
    a = manager.add_task(task_list.id, "A")
    b = manager.add_task(task_list.id, "B")

    task, result = manager.set_task_dependencies(task_list.id, b.id, [a.id])
    assert task.dependencies == [a.id]
    assert result.is_valid is True

    with pytest.raises(DependencyValidationError) as excinfo:
        manager.set_task_dependencies(task_list.id, a.id, [b.id])
    assert excinfo.value.code == "CIRCULAR_DEPENDENCY_ERROR"
    assert excinfo.value.result.circular_dependencies == [[a.id, b.id]]
    assert "Suggestions:" in str(excinfo.value)
    assert manager.get_list(task_list.id).get_task(a.id).dependencies == []


def test_set_dependencies_returns_warnings_and_clears(tmp_path: Path) -> None:
    manager = build_manager(tmp_path, DependencyPolicy(max_dependencies=1))
    task_list = manager.create_list("Release")
    a = manager.add_task(task_list.id, "A")
    b = manager.add_task(task_list.id, "B")
    c = manager.add_task(task_list.id, "C")

    task, result = manager.set_task_dependencies(task_list.id, c.id, [a.id, b.id])
    assert task.dependencies == [a.id, b.id]
    assert result.warnings == [
        "Task has 2 dependencies, more than the recommended maximum of 1"
    ]

    task, result = manager.set_task_dependencies(task_list.id, c.id, [])
    assert task.dependencies == []
    assert result.warnings == []


def test_validate_dependencies_is_a_dry_run(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")
    a = manager.add_task(task_list.id, "A")

    result = manager.validate_dependencies(task_list.id, a.id, [a.id])

    assert result.is_valid is False
    assert manager.get_list(task_list.id).get_task(a.id).dependencies == []
    with pytest.raises(TaskNotFoundError):
        manager.validate_dependencies(task_list.id, "ghost", [])


def test_remove_task_strips_dangling_edges(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")
    setup = manager.add_task(task_list.id, "Setup")
    build = manager.add_task(task_list.id, "Build", dependencies=[setup.id])

    manager.remove_task(task_list.id, setup.id)

    remaining = manager.get_list(task_list.id).tasks
    assert [t.id for t in remaining] == [build.id]
    assert remaining[0].dependencies == []
    with pytest.raises(TaskNotFoundError):
        manager.remove_task(task_list.id, setup.id)


def test_critical_path_resolves_tasks(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")
    setup = manager.add_task(task_list.id, "Setup", estimated_duration=60)
    build = manager.add_task(
        task_list.id, "Build", estimated_duration=120, dependencies=[setup.id]
    )
    test = manager.add_task(task_list.id, "Test", estimated_duration=90, dependencies=[build.id])
    manager.add_task(task_list.id, "Docs", estimated_duration=30, dependencies=[setup.id])

    path = manager.get_critical_path(task_list.id)

    assert [t.title for t in path] == ["Setup", "Build", "Test"]
    assert path[-1].id == test.id


def test_tasks_are_scoped_to_their_list(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    first = manager.create_list("First")
    second = manager.create_list("Second")
    foreign = manager.add_task(second.id, "Elsewhere")

    with pytest.raises(TaskNotFoundError):
        manager.complete_task(first.id, foreign.id)
    with pytest.raises(DependencyValidationError):
        manager.add_task(first.id, "Local", dependencies=[foreign.id])


def test_bulk_dependencies_see_earlier_changes(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")
    a = manager.add_task(task_list.id, "A")
    b = manager.add_task(task_list.id, "B")
    c = manager.add_task(task_list.id, "C")

    results = manager.set_bulk_dependencies(task_list.id, {b.id: [a.id], c.id: [b.id]})

    assert set(results) == {b.id, c.id}
    assert all(result.is_valid for result in results.values())
    assert [t.dependencies for t in manager.get_list(task_list.id).tasks] == [[], [a.id], [b.id]]

    # A -> C would close A -> C -> B -> A, unless B drops A earlier in the batch.
    with pytest.raises(DependencyValidationError) as excinfo:
        manager.set_bulk_dependencies(task_list.id, {a.id: [c.id]})
    assert excinfo.value.code == "CIRCULAR_DEPENDENCY_ERROR"
    manager.set_bulk_dependencies(task_list.id, {b.id: [], a.id: [c.id]})
    assert [t.dependencies for t in manager.get_list(task_list.id).tasks] == [[c.id], [], [b.id]]


def test_bulk_dependencies_are_all_or_nothing(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")
    a = manager.add_task(task_list.id, "A")
    b = manager.add_task(task_list.id, "B")
    before = manager.get_list(task_list.id).updated_at

    with pytest.raises(DependencyValidationError) as excinfo:
        manager.set_bulk_dependencies(task_list.id, {b.id: [a.id], a.id: [b.id]})
    assert excinfo.value.task_id == a.id
    with pytest.raises(TaskNotFoundError):
        manager.set_bulk_dependencies(task_list.id, {b.id: [a.id], "ghost": []})

    loaded = manager.get_list(task_list.id)
    assert [t.dependencies for t in loaded.tasks] == [[], []]
    assert loaded.updated_at == before


def test_clear_bulk_dependencies(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")
    setup = manager.add_task(task_list.id, "Setup")
    build = manager.add_task(task_list.id, "Build", dependencies=[setup.id])
    docs = manager.add_task(task_list.id, "Docs", dependencies=[setup.id])

    cleared = manager.clear_bulk_dependencies(task_list.id, [build.id, docs.id, build.id])

    assert cleared == 2
    assert all(t.dependencies == [] for t in manager.get_list(task_list.id).tasks)


def test_suggest_task_order_puts_prerequisites_first(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")
    docs = manager.add_task(task_list.id, "Docs")
    setup = manager.add_task(task_list.id, "Setup")
    build = manager.add_task(task_list.id, "Build", dependencies=[setup.id])
    manager.set_task_dependencies(task_list.id, docs.id, [build.id])

    ordered = manager.suggest_task_order(task_list.id)

    assert [t.title for t in ordered] == ["Setup", "Build", "Docs"]
    with pytest.raises(TaskListNotFoundError):
        manager.suggest_task_order("nope")


def test_error_code_follows_check_order(tmp_path: Path) -> None:
    manager = build_manager(tmp_path)
    task_list = manager.create_list("Release")
    a = manager.add_task(task_list.id, "A")
    b = manager.add_task(task_list.id, "B", dependencies=[a.id])

    with pytest.raises(DependencyValidationError) as self_and_cycle:
        manager.set_task_dependencies(task_list.id, a.id, [a.id, b.id])
    with pytest.raises(DependencyValidationError) as duplicate:
        manager.set_task_dependencies(task_list.id, b.id, [a.id, a.id])

    assert self_and_cycle.value.code == "SELF_DEPENDENCY_ERROR"
    assert duplicate.value.code == "DUPLICATE_DEPENDENCY_ERROR"
