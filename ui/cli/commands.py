"""Typer command handlers."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer

from analysis.dag_renderer import DAG_STYLES
from core.orchestrator import Orchestrator, RuntimeBundle
from tasks.types import Task

_FORMATS = ("analysis", "dag", "both")


def _runtime(root: Path | None = None) -> RuntimeBundle:
    bundle = Orchestrator(root=root).build()
    level = str(bundle.config.get("logging", {}).get("level", "WARNING")).upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return bundle


@contextmanager
def _reporting_errors() -> Iterator[None]:
    """Turn lookup and validation errors into a message and exit code 1."""
    try:
        yield
    except (LookupError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _task_line(task: Task) -> str:
    deps = f" deps={','.join(task.dependencies)}" if task.dependencies else ""
    return f"{task.id}  [{task.status.value}] p{task.priority} {task.title}{deps}"


def lists_create(title: str, description: str) -> None:
    """Create a task list."""
    bundle = _runtime()
    task_list = bundle.manager.create_list(title=title, description=description)
    typer.echo(f"Created list {task_list.id}: {task_list.title}")


def lists_show(list_id: str) -> None:
    bundle = _runtime()
    with _reporting_errors():
        task_list = bundle.manager.get_list(list_id)
    typer.echo(f"{task_list.title} ({task_list.id})")
    for task in task_list.tasks:
        typer.echo(f"- {_task_line(task)}")


def lists_all(limit: int) -> None:
    bundle = _runtime()
    for task_list in bundle.manager.list_lists(limit=limit):
        typer.echo(f"{task_list.id}  {task_list.title} ({len(task_list.tasks)} tasks)")


def lists_delete(list_id: str) -> None:
    bundle = _runtime()
    with _reporting_errors():
        bundle.manager.delete_list(list_id)
    typer.echo(f"Deleted list {list_id}")


def tasks_add(
    list_id: str,
    title: str,
    description: str,
    priority: int,
    duration: int | None,
    tags: list[str],
    dependencies: list[str],
) -> None:
    """Add a task, rejecting invalid dependencies."""
    bundle = _runtime()
    with _reporting_errors():
        task = bundle.manager.add_task(
            list_id,
            title=title,
            description=description,
            priority=priority,
            estimated_duration=duration,
            tags=tags,
            dependencies=dependencies,
        )
    typer.echo(f"Added task {task.id}: {task.title}")


def tasks_complete(list_id: str, task_id: str) -> None:
    bundle = _runtime()
    with _reporting_errors():
        task = bundle.manager.complete_task(list_id, task_id)
    typer.echo(f"Completed {task.title}")


def tasks_remove(list_id: str, task_id: str) -> None:
    bundle = _runtime()
    with _reporting_errors():
        bundle.manager.remove_task(list_id, task_id)
    typer.echo(f"Removed task {task_id}")


def deps_set(list_id: str, task_id: str, dependency_ids: list[str]) -> None:
    """Replace dependencies through the agent tool so the call is audited."""
    bundle = _runtime()
    result = bundle.tool_registry.call(
        "set_task_dependencies",
        {"list_id": list_id, "task_id": task_id, "dependency_ids": dependency_ids},
    )
    if not result["success"]:
        typer.echo(result["outcome"], err=True)
        raise typer.Exit(code=1)
    data = result["data"]
    typer.echo(data["message"])
    for warning in data["warnings"]:
        typer.echo(f"  warning: {warning}")


def deps_validate(list_id: str, task_id: str, dependency_ids: list[str]) -> None:
    bundle = _runtime()
    with _reporting_errors():
        result = bundle.manager.validate_dependencies(list_id, task_id, dependency_ids)
    typer.echo(json.dumps(result.to_dict(), indent=2))
    if not result.is_valid:
        raise typer.Exit(code=1)


def deps_analyze(list_id: str, output: str, style: str) -> None:
    """Print the analysis payload, a DAG rendering, or both."""
    if output not in _FORMATS:
        raise typer.BadParameter(f"format must be one of {', '.join(_FORMATS)}")
    if style not in DAG_STYLES:
        raise typer.BadParameter(f"style must be one of {', '.join(DAG_STYLES)}")
    bundle = _runtime()
    result = bundle.tool_registry.call(
        "analyze_task_dependencies",
        {"list_id": list_id, "format": output, "dag_style": style},
    )
    if not result["success"]:
        typer.echo(result["outcome"], err=True)
        raise typer.Exit(code=1)
    data = result["data"]
    if "analysis" in data:
        typer.echo(json.dumps(_json_safe(data["analysis"]), indent=2))
    if "dag" in data:
        typer.echo(data["dag"])


def deps_ready(list_id: str) -> None:
    bundle = _runtime()
    with _reporting_errors():
        ready = bundle.manager.get_ready_tasks(list_id)
    if not ready:
        typer.echo("No tasks are ready.")
    for task in ready:
        typer.echo(f"- {_task_line(task)}")


def deps_blocked(list_id: str) -> None:
    bundle = _runtime()
    with _reporting_errors():
        blocked = bundle.manager.get_blocked_tasks(list_id)
    if not blocked:
        typer.echo("No tasks are blocked.")
    for entry in blocked:
        blockers = ", ".join(t.title for t in entry.blocked_by) or "missing tasks"
        typer.echo(f"- {entry.item.title} <- {blockers}")


def deps_path(list_id: str) -> None:
    bundle = _runtime()
    with _reporting_errors():
        task_list = bundle.manager.get_list(list_id)
        path = bundle.manager.get_critical_path(list_id)
    if not path:
        typer.echo("No critical path (no dependency chains).")
        return
    minutes = bundle.resolver.critical_path_duration([t.id for t in path], task_list.tasks)
    typer.echo(" -> ".join(task.title for task in path))
    typer.echo(f"Total: {minutes} minutes")


def deps_order(list_id: str) -> None:
    bundle = _runtime()
    with _reporting_errors():
        ordered = bundle.manager.suggest_task_order(list_id)
    for index, task in enumerate(ordered, start=1):
        typer.echo(f"{index}. {_task_line(task)}")


def config_show() -> None:
    """Show effective runtime config."""
    bundle = _runtime()
    typer.echo(json.dumps(_json_safe(bundle.config), indent=2))


def tools_list() -> None:
    """List tools and enabled flags."""
    bundle = _runtime()
    for tool in bundle.tool_registry.list_tools():
        typer.echo(f"{tool.name}: {'enabled' if tool.enabled else 'disabled'}")


def tools_audit(limit: int) -> None:
    """Print recent audit events, newest last."""
    bundle = _runtime()
    for event in bundle.audit_logger.read_events()[-limit:]:
        status = "ok" if event["success"] else f"failed ({event['reason']})"
        typer.echo(f"{event['timestamp']} {event['tool']}: {status}")


def _json_safe(payload: object) -> object:
    """Convert datetimes to strings for JSON output."""
    if isinstance(payload, dict):
        return {k: _json_safe(v) for k, v in payload.items()}
    if isinstance(payload, list):
        return [_json_safe(v) for v in payload]
    if hasattr(payload, "isoformat"):
        return payload.isoformat()
    return payload
