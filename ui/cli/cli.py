"""CLI entrypoint for taskgraph."""

from __future__ import annotations

import typer

from ui.cli import commands

app = typer.Typer(help="Task lists with dependency tracking")
lists_app = typer.Typer(help="Task list commands")
tasks_app = typer.Typer(help="Task commands")
deps_app = typer.Typer(help="Dependency commands")
config_app = typer.Typer(help="Configuration commands")
tools_app = typer.Typer(help="Tool commands")


@lists_app.command("create")
def lists_create_cmd(
    title: str = typer.Argument(..., help="List title"),
    description: str = typer.Option("", help="List description"),
) -> None:
    """Create an empty task list."""
    commands.lists_create(title=title, description=description)


@lists_app.command("show")
def lists_show_cmd(list_id: str) -> None:
    """Show a task list with its tasks."""
    commands.lists_show(list_id=list_id)


@lists_app.command("all")
def lists_all_cmd(limit: int = typer.Option(20, min=1, max=500)) -> None:
    """List task lists, most recently updated first."""
    commands.lists_all(limit=limit)


@lists_app.command("delete")
def lists_delete_cmd(list_id: str) -> None:
    """Delete a task list and its tasks."""
    commands.lists_delete(list_id=list_id)


@tasks_app.command("add")
def tasks_add_cmd(
    list_id: str = typer.Argument(..., help="Target list id"),
    title: str = typer.Argument(..., help="Task title"),
    description: str = typer.Option("", help="Task description"),
    priority: int = typer.Option(3, min=1, max=5, help="Priority (1-5)"),
    duration: int | None = typer.Option(None, min=1, help="Estimated minutes"),
    tag: list[str] = typer.Option([], "--tag", help="Tag, repeatable"),
    depends_on: list[str] = typer.Option([], "--depends-on", help="Prerequisite id, repeatable"),
) -> None:
    """Add a task to a list."""
    commands.tasks_add(
        list_id=list_id,
        title=title,
        description=description,
        priority=priority,
        duration=duration,
        tags=tag,
        dependencies=depends_on,
    )


@tasks_app.command("complete")
def tasks_complete_cmd(list_id: str, task_id: str) -> None:
    """Mark a task completed."""
    commands.tasks_complete(list_id=list_id, task_id=task_id)


@tasks_app.command("remove")
def tasks_remove_cmd(list_id: str, task_id: str) -> None:
    """Remove a task and every edge pointing at it."""
    commands.tasks_remove(list_id=list_id, task_id=task_id)


@deps_app.command("set")
def deps_set_cmd(
    list_id: str = typer.Argument(...),
    task_id: str = typer.Argument(...),
    dependency_ids: list[str] = typer.Argument(None, help="New prerequisite ids; none clears"),
) -> None:
    """Replace the dependencies of a task."""
    commands.deps_set(list_id=list_id, task_id=task_id, dependency_ids=dependency_ids or [])


@deps_app.command("validate")
def deps_validate_cmd(
    list_id: str = typer.Argument(...),
    task_id: str = typer.Argument(...),
    dependency_ids: list[str] = typer.Argument(None),
) -> None:
    """Check a proposed dependency list without saving it."""
    commands.deps_validate(list_id=list_id, task_id=task_id, dependency_ids=dependency_ids or [])


@deps_app.command("analyze")
def deps_analyze_cmd(
    list_id: str,
    output: str = typer.Option("analysis", "--format", help="analysis, dag or both"),
    style: str = typer.Option("ascii", "--style", help="DAG style: ascii, dot or mermaid"),
) -> None:
    """Analyze the dependency structure of a list."""
    commands.deps_analyze(list_id=list_id, output=output, style=style)


@deps_app.command("ready")
def deps_ready_cmd(list_id: str) -> None:
    """Show tasks that can start now."""
    commands.deps_ready(list_id=list_id)


@deps_app.command("blocked")
def deps_blocked_cmd(list_id: str) -> None:
    """Show tasks waiting on prerequisites."""
    commands.deps_blocked(list_id=list_id)


@deps_app.command("order")
def deps_order_cmd(list_id: str) -> None:
    """Show the suggested work order of a list."""
    commands.deps_order(list_id=list_id)


@deps_app.command("path")
def deps_path_cmd(list_id: str) -> None:
    """Show the critical path of a list."""
    commands.deps_path(list_id=list_id)


@config_app.command("show")
def config_show_cmd() -> None:
    """Show effective configuration."""
    commands.config_show()


@tools_app.command("list")
def tools_list_cmd() -> None:
    """List tool status."""
    commands.tools_list()


@tools_app.command("audit")
def tools_audit_cmd(limit: int = typer.Option(20, min=1, max=1000)) -> None:
    """Show the most recent audited tool calls."""
    commands.tools_audit(limit=limit)


app.add_typer(lists_app, name="lists")
app.add_typer(tasks_app, name="tasks")
app.add_typer(deps_app, name="deps")
app.add_typer(config_app, name="config")
app.add_typer(tools_app, name="tools")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
