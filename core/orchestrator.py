"""Top-level application wiring."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from core.audit_logger import AuditLogger
from core.policy_runtime import (
    dependency_policy_from_config,
    ensure_runtime_dirs,
    load_effective_config,
)
from dependency_engine.resolver import DependencyResolver
from tasks.stores.sql_store import SQLStore
from tasks.task_list_manager import TaskListManager
from tools.tool_registry import ToolRegistry, build_default_registry


@dataclass
class RuntimeBundle:
    """Holds initialized runtime components."""

    config: dict[str, Any]
    manager: TaskListManager
    resolver: DependencyResolver
    audit_logger: AuditLogger
    tool_registry: ToolRegistry


class Orchestrator:
    """Creates and wires runtime components for CLI and tool use."""

    def __init__(self, root: Path | None = None) -> None:
        default_root = Path(__file__).resolve().parents[1]
        self.root = (root or default_root).resolve()

    def build(self) -> RuntimeBundle:
        config = load_effective_config(self.root)
        paths = ensure_runtime_dirs(self.root, config)

        sql_store = SQLStore(paths["db_path"])
        sql_store.create_all()

        resolver = DependencyResolver(policy=dependency_policy_from_config(config))
        manager = TaskListManager(sql_store=sql_store, resolver=resolver)
        audit_logger = AuditLogger(paths["audit_log_path"])
        tool_registry = build_default_registry(
            manager=manager,
            audit_logger=audit_logger,
            config=config,
        )
        return RuntimeBundle(
            config=config,
            manager=manager,
            resolver=resolver,
            audit_logger=audit_logger,
            tool_registry=tool_registry,
        )
