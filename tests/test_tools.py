"""Agent tool protocol tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from core.audit_logger import AuditLogger
from tasks.stores.sql_store import SQLStore
from tasks.task_list_manager import TaskListManager
from tasks.types import TaskStatus
from tools.tool_registry import ToolRegistry, build_default_registry


def build_registry(
    tmp_path: Path, config: dict[str, Any] | None = None
) -> tuple[ToolRegistry, TaskListManager, AuditLogger]:
    store = SQLStore(db_path=tmp_path / "tasks.db")
    store.create_all()
    manager = TaskListManager(sql_store=store)
    audit = AuditLogger(tmp_path / "audit.jsonl")
    registry = build_default_registry(manager=manager, audit_logger=audit, config=config or {})
    return registry, manager, audit


def test_set_dependencies_tool_updates_task(tmp_path: Path) -> None:
    registry, manager, audit = build_registry(tmp_path)
    task_list = manager.create_list("Release")
    setup = manager.add_task(task_list.id, "Setup")
    build = manager.add_task(task_list.id, "Build")

    result = registry.call(
        "set_task_dependencies",
        {"list_id": task_list.id, "task_id": build.id, "dependency_ids": [setup.id]},
    )

    assert result["success"] is True
    assert result["data"]["dependencies"] == [setup.id]
    assert result["data"]["message"] == "Dependencies updated successfully"
    events = audit.read_events()
    assert events[-1]["tool"] == "set_task_dependencies"
    assert events[-1]["success"] is True


def test_cycle_is_returned_as_failure_result(tmp_path: Path) -> None:
    registry, manager, audit = build_registry(tmp_path)
    task_list = manager.create_list("Release")
    a = manager.add_task(task_list.id, "A")
    b = manager.add_task(task_list.id, "B", dependencies=[a.id])

    result = registry.call(
        "set_task_dependencies",
        {"list_id": task_list.id, "task_id": a.id, "dependency_ids": [b.id]},
    )

    assert result["success"] is False
    assert result["code"] == "CIRCULAR_DEPENDENCY_ERROR"
    assert result["details"]["circular_dependencies"] == [[a.id, b.id]]
    assert "Dependency validation failed" in result["outcome"]
    assert audit.read_events()[-1]["reason"] == "CIRCULAR_DEPENDENCY_ERROR"


def test_validate_tool_does_not_persist(tmp_path: Path) -> None:
    registry, manager, _ = build_registry(tmp_path)
    task_list = manager.create_list("Release")
    a = manager.add_task(task_list.id, "A")

    result = registry.call(
        "validate_task_dependencies",
        {"list_id": task_list.id, "task_id": a.id, "dependency_ids": ["ghost"]},
    )

    assert result["success"] is True
    assert result["data"]["is_valid"] is False
    assert result["data"]["errors"] == ["Invalid dependencies: ghost do not exist"]
    assert manager.get_list(task_list.id).tasks[0].dependencies == []


def test_bad_arguments_and_unknown_ids_fail_cleanly(tmp_path: Path) -> None:
    registry, _, audit = build_registry(tmp_path)

    missing_arg = registry.call("set_task_dependencies", {"list_id": "x"})
    unknown_list = registry.call("get_ready_tasks", {"list_id": "nope"})
    unknown_tool = registry.call("delete_everything", {})

    assert missing_arg["success"] is False
    assert missing_arg["outcome"].startswith("Invalid arguments")
    assert unknown_list["success"] is False
    assert "nope" in unknown_list["outcome"]
    assert unknown_tool["success"] is False
    reasons = [event["reason"] for event in audit.read_events()]
    assert reasons == ["invalid_arguments", "TaskListNotFoundError"]


def test_ready_and_blocked_tools(tmp_path: Path) -> None:
    registry, manager, _ = build_registry(tmp_path)
    task_list = manager.create_list("Release")
    setup = manager.add_task(task_list.id, "Setup")
    manager.add_task(task_list.id, "Build", dependencies=[setup.id])
    manager.add_task(task_list.id, "Docs", dependencies=[setup.id])

    ready = registry.call("get_ready_tasks", {"list_id": task_list.id, "limit": 5})
    blocked = registry.call("get_blocked_tasks", {"list_id": task_list.id})

    assert ready["data"]["total_ready"] == 1
    assert [t["title"] for t in ready["data"]["tasks"]] == ["Setup"]
    assert [entry["task"]["title"] for entry in blocked["data"]["blocked"]] == ["Build", "Docs"]
    assert blocked["data"]["blocked"][0]["blocked_by"] == [
        {"id": setup.id, "title": "Setup", "status": "pending"}
    ]


def test_analyze_tool_formats(tmp_path: Path) -> None:
    registry, manager, _ = build_registry(tmp_path)
    task_list = manager.create_list("Release")
    setup = manager.add_task(task_list.id, "Setup", estimated_duration=60)
    manager.add_task(task_list.id, "Build", estimated_duration=120, dependencies=[setup.id])

    analysis = registry.call("analyze_task_dependencies", {"list_id": task_list.id})
    both = registry.call(
        "analyze_task_dependencies",
        {"list_id": task_list.id, "format": "both", "dag_style": "mermaid"},
    )
    bad_style = registry.call(
        "analyze_task_dependencies", {"list_id": task_list.id, "dag_style": "svg"}
    )

    assert set(analysis["data"]) == {"analysis"}
    assert analysis["data"]["analysis"]["summary"]["critical_path_duration"] == 180
    assert set(both["data"]) == {"analysis", "dag"}
    assert both["data"]["dag"].startswith("graph TD")
    assert bad_style["success"] is False


def test_disabled_tools_are_hidden(tmp_path: Path) -> None:
    config = {"tools": {"get_ready_tasks": {"enabled": False}}}
    registry, manager, _ = build_registry(tmp_path, config)
    task_list = manager.create_list("Release")

    listing = {tool.name: tool.enabled for tool in registry.list_tools()}
    result = registry.call("get_ready_tasks", {"list_id": task_list.id})

    assert registry.get("get_ready_tasks") is None
    assert registry.get("get_blocked_tasks") is not None
    assert listing["get_ready_tasks"] is False
    assert len(listing) == 7
    assert result["success"] is False
    assert "disabled" in result["outcome"]


def test_ready_tool_skips_cancelled_and_sorts_by_priority(tmp_path: Path) -> None:
    registry, manager, _ = build_registry(tmp_path)
    task_list = manager.create_list("Release")
    manager.add_task(task_list.id, "low", priority=1)
    manager.add_task(task_list.id, "high", priority=5)
    dropped = manager.add_task(task_list.id, "cancelled", priority=5)
    manager.update_task(task_list.id, dropped.id, status=TaskStatus.CANCELLED)

    result = registry.call("get_ready_tasks", {"list_id": task_list.id, "limit": 1})

    data = result["data"]
    assert [t["title"] for t in data["tasks"]] == ["high"]
    assert data["total_ready"] == 2
    assert data["next_actions"][0] == 'Start with high-priority tasks: "high"'
    assert data["summary"] == {
        "total_tasks": 3,
        "completed_tasks": 0,
        "ready_tasks": 2,
        "blocked_tasks": 0,
    }


def test_ready_tool_limit_defaults_to_tool_setting(tmp_path: Path) -> None:
    config = {"tools": {"get_ready_tasks": {"default_limit": 1}}}
    registry, manager, _ = build_registry(tmp_path, config)
    task_list = manager.create_list("Release")
    manager.add_task(task_list.id, "A")
    manager.add_task(task_list.id, "B")

    defaulted = registry.call("get_ready_tasks", {"list_id": task_list.id})
    explicit = registry.call("get_ready_tasks", {"list_id": task_list.id, "limit": 5})
    too_many = registry.call("get_ready_tasks", {"list_id": task_list.id, "limit": 51})

    assert len(defaulted["data"]["tasks"]) == 1
    assert defaulted["data"]["total_ready"] == 2
    assert len(explicit["data"]["tasks"]) == 2
    assert too_many["success"] is False


def test_bulk_set_tool_applies_every_change(tmp_path: Path) -> None:
    registry, manager, _ = build_registry(tmp_path)
    task_list = manager.create_list("Release")
    setup = manager.add_task(task_list.id, "Setup")
    build = manager.add_task(task_list.id, "Build")
    test = manager.add_task(task_list.id, "Test")

    result = registry.call(
        "set_bulk_task_dependencies",
        {
            "list_id": task_list.id,
            "dependencies": {build.id: [setup.id], test.id: [build.id]},
        },
    )

    assert result["success"] is True
    assert result["data"]["processed_count"] == 2
    assert result["data"]["message"] == "Dependencies set for 2 tasks"
    assert result["data"]["warnings"] == {}
    loaded = manager.get_list(task_list.id)
    assert loaded.get_task(build.id).dependencies == [setup.id]
    assert loaded.get_task(test.id).dependencies == [build.id]


def test_bulk_set_tool_rejects_cycle_between_changes(tmp_path: Path) -> None:
    registry, manager, audit = build_registry(tmp_path)
    task_list = manager.create_list("Release")
    a = manager.add_task(task_list.id, "A")
    b = manager.add_task(task_list.id, "B")

    result = registry.call(
        "set_bulk_task_dependencies",
        {"list_id": task_list.id, "dependencies": {b.id: [a.id], a.id: [b.id]}},
    )

    assert result["success"] is False
    assert result["code"] == "CIRCULAR_DEPENDENCY_ERROR"
    assert [t.dependencies for t in manager.get_list(task_list.id).tasks] == [[], []]
    assert audit.read_events()[-1]["reason"] == "CIRCULAR_DEPENDENCY_ERROR"


def test_bulk_clear_tool(tmp_path: Path) -> None:
    registry, manager, _ = build_registry(tmp_path)
    task_list = manager.create_list("Release")
    setup = manager.add_task(task_list.id, "Setup")
    build = manager.add_task(task_list.id, "Build", dependencies=[setup.id])
    docs = manager.add_task(task_list.id, "Docs", dependencies=[setup.id])

    result = registry.call(
        "clear_bulk_task_dependencies",
        {"list_id": task_list.id, "task_ids": [build.id, docs.id]},
    )
    empty = registry.call("clear_bulk_task_dependencies", {"list_id": task_list.id, "task_ids": []})

    assert result["success"] is True
    assert result["data"]["processed_count"] == 2
    assert result["data"]["message"] == "Dependencies cleared for 2 tasks"
    assert all(t.dependencies == [] for t in manager.get_list(task_list.id).tasks)
    assert empty["success"] is False
