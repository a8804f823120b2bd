"""Tool registry and default tool wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.audit_logger import AuditLogger
from tasks.task_list_manager import TaskListManager
from tools.base_tool import BaseTool
from tools.dependency_tools import (
    AnalyzeTaskDependenciesTool,
    ClearBulkTaskDependenciesTool,
    GetBlockedTasksTool,
    GetReadyTasksTool,
    SetBulkTaskDependenciesTool,
    SetTaskDependenciesTool,
    ValidateTaskDependenciesTool,
)

DEFAULT_TOOLS: dict[str, type[BaseTool]] = {
    "set_task_dependencies": SetTaskDependenciesTool,
    "validate_task_dependencies": ValidateTaskDependenciesTool,
    "analyze_task_dependencies": AnalyzeTaskDependenciesTool,
    "get_ready_tasks": GetReadyTasksTool,
    "get_blocked_tasks": GetBlockedTasksTool,
    "set_bulk_task_dependencies": SetBulkTaskDependenciesTool,
    "clear_bulk_task_dependencies": ClearBulkTaskDependenciesTool,
}


@dataclass
class RegisteredTool:
    """Metadata for tool listing output."""

    name: str
    enabled: bool
    description: str = ""


class ToolRegistry:
    """In-memory registry of agent tools keyed by name."""

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}

    def register(self, name: str, tool: BaseTool) -> None:
        self._tools[name] = tool

    def get(self, name: str) -> BaseTool | None:
        tool = self._tools.get(name)
        if tool and tool.enabled:
            return tool
        return None

    def list_tools(self) -> list[RegisteredTool]:
        return [
            RegisteredTool(name=name, enabled=tool.enabled, description=tool.description)
            for name, tool in sorted(self._tools.items())
        ]

    def call(self, name: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Dispatch ``payload`` to a tool, answering unknown names with a failure result."""
        tool = self._tools.get(name)
        if tool is None:
            return {"success": False, "tool": name, "outcome": f"Unknown tool '{name}'."}
        return tool.execute(payload)


def _tool_enabled(config: dict[str, Any], tool_name: str, default: bool) -> bool:
    tools_cfg = config.get("tools", {}) or {}
    tool_cfg = tools_cfg.get(tool_name, {})
    if not isinstance(tool_cfg, dict):
        return default
    return bool(tool_cfg.get("enabled", default))


def _tool_settings(config: dict[str, Any], tool_name: str) -> dict[str, Any]:
    tools_cfg = config.get("tools", {}) or {}
    tool_cfg = tools_cfg.get(tool_name, {})
    if not isinstance(tool_cfg, dict):
        return {}
    return dict(tool_cfg)


def build_default_registry(
    *,
    manager: TaskListManager,
    audit_logger: AuditLogger,
    config: dict[str, Any],
) -> ToolRegistry:
    """Register every dependency tool, honouring ``tools.<name>.enabled``."""
    registry = ToolRegistry()
    for name, tool_cls in DEFAULT_TOOLS.items():
        registry.register(
            name,
            tool_cls(
                name=name,
                manager=manager,
                audit_logger=audit_logger,
                enabled=_tool_enabled(config, name, True),
                settings=_tool_settings(config, name),
            ),
        )
    return registry
