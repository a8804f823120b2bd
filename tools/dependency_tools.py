"""Dependency tools for agents: set (single and bulk), validate, analyze, ready and blocked."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from analysis.dag_renderer import render_dag
from analysis.dependency_analysis import analyze_dependencies, ready_task_report
from tasks.types import Task
from tools.base_tool import BaseTool

DEFAULT_READY_LIMIT = 20


def _task_payload(task: Task) -> dict[str, Any]:
    return task.model_dump(mode="json")


class ListArgs(BaseModel):
    list_id: str = Field(min_length=1)


class ReadyTasksArgs(ListArgs):
    limit: int | None = Field(default=None, ge=1, le=50)


class DependencyArgs(ListArgs):
    task_id: str = Field(min_length=1)
    dependency_ids: list[str] = Field(default_factory=list)


class BulkDependencyArgs(ListArgs):
    dependencies: dict[str, list[str]] = Field(min_length=1)


class BulkClearArgs(ListArgs):
    task_ids: list[str] = Field(min_length=1)


class AnalyzeArgs(ListArgs):
    format: Literal["analysis", "dag", "both"] = "analysis"
    dag_style: Literal["ascii", "dot", "mermaid"] = "ascii"


class SetTaskDependenciesTool(BaseTool):
    """Replace all dependencies of a task; an empty list clears them."""

    args_model = DependencyArgs
    description = "Set the full dependency list of a task after validating it."

    def _run(self, args: DependencyArgs) -> dict[str, Any]:
        task, result = self.manager.set_task_dependencies(
            args.list_id, args.task_id, args.dependency_ids
        )
        message = "Dependencies updated successfully"
        if result.warnings:
            message += f" ({len(result.warnings)} warnings)"
        return {**_task_payload(task), "message": message, "warnings": list(result.warnings)}


class ValidateTaskDependenciesTool(BaseTool):
    """Dry run of ``set_task_dependencies``."""

    args_model = DependencyArgs
    description = "Check a proposed dependency list without saving it."

    def _run(self, args: DependencyArgs) -> dict[str, Any]:
        result = self.manager.validate_dependencies(
            args.list_id, args.task_id, args.dependency_ids
        )
        return result.to_dict()


class AnalyzeTaskDependenciesTool(BaseTool):
    args_model = AnalyzeArgs
    description = "Analyze the dependency structure of a list, optionally as a DAG rendering."

    def _run(self, args: AnalyzeArgs) -> dict[str, Any]:
        task_list = self.manager.get_list(args.list_id)
        data: dict[str, Any] = {}
        if args.format in ("analysis", "both"):
            data["analysis"] = analyze_dependencies(task_list, self.manager.resolver)
        if args.format in ("dag", "both"):
            graph = self.manager.resolver.build_graph(task_list.tasks)
            data["dag"] = render_dag(task_list.tasks, graph, args.dag_style)
        return data


class GetReadyTasksTool(BaseTool):
    """Actionable ready tasks, highest priority first, with next-step hints.

    ``limit`` falls back to the ``default_limit`` tool setting.
    """

    args_model = ReadyTasksArgs
    description = "List tasks whose prerequisites are all completed, best first."

    def _run(self, args: ReadyTasksArgs) -> dict[str, Any]:
        limit = args.limit or int(self.settings.get("default_limit", DEFAULT_READY_LIMIT))
        report = ready_task_report(
            self.manager.get_list(args.list_id), self.manager.resolver, limit=limit
        )
        report["tasks"] = [_task_payload(task) for task in report["tasks"]]
        return report


class GetBlockedTasksTool(BaseTool):
    args_model = ListArgs
    description = "List incomplete tasks that are waiting on other tasks."

    def _run(self, args: ListArgs) -> dict[str, Any]:
        blocked = self.manager.get_blocked_tasks(args.list_id)
        return {
            "list_id": args.list_id,
            "blocked": [
                {
                    "task": _task_payload(entry.item),
                    "blocked_by": [
                        {"id": t.id, "title": t.title, "status": t.status.value}
                        for t in entry.blocked_by
                    ],
                }
                for entry in blocked
            ],
        }


class SetBulkTaskDependenciesTool(BaseTool):
    """Replace dependencies of several tasks in one all-or-nothing change."""

    args_model = BulkDependencyArgs
    description = "Set dependencies for many tasks at once; any rejection applies none."

    def _run(self, args: BulkDependencyArgs) -> dict[str, Any]:
        results = self.manager.set_bulk_dependencies(args.list_id, args.dependencies)
        return {
            "list_id": args.list_id,
            "processed_count": len(results),
            "message": f"Dependencies set for {len(results)} tasks",
            "warnings": {
                task_id: list(result.warnings)
                for task_id, result in results.items()
                if result.warnings
            },
        }


class ClearBulkTaskDependenciesTool(BaseTool):
    args_model = BulkClearArgs
    description = "Remove every dependency from the given tasks."

    def _run(self, args: BulkClearArgs) -> dict[str, Any]:
        cleared = self.manager.clear_bulk_dependencies(args.list_id, args.task_ids)
        return {
            "list_id": args.list_id,
            "processed_count": cleared,
            "message": f"Dependencies cleared for {cleared} tasks",
        }
