"""Base agent tool: argument validation, auditing and error-to-result conversion."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ValidationError

from core.audit_logger import AuditLogger
from tasks.errors import DependencyValidationError
from tasks.task_list_manager import TaskListManager


class BaseTool(ABC):
    """Base class for tools exposed over the agent-tool protocol."""

    args_model: type[BaseModel]
    description: str = ""

    def __init__(
        self,
        name: str,
        manager: TaskListManager,
        audit_logger: AuditLogger,
        enabled: bool = True,
        settings: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.manager = manager
        self.audit_logger = audit_logger
        self.enabled = enabled
        self.settings = settings or {}

    def execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Validate arguments, run the tool and always answer with a result dict."""
        if not self.enabled:
            return self._failure(payload, f"Tool '{self.name}' disabled.", reason="disabled")
        try:
            args = self.args_model.model_validate(payload)
        except ValidationError as exc:
            return self._failure(payload, f"Invalid arguments: {exc}", reason="invalid_arguments")
        try:
            data = self._run(args)
        except DependencyValidationError as exc:
            result = self._failure(payload, str(exc), reason=exc.code)
            result["code"] = exc.code
            result["details"] = {"task_id": exc.task_id, **exc.result.to_dict()}
            return result
        except (LookupError, ValueError) as exc:
            return self._failure(payload, f"Error: {exc}", reason=type(exc).__name__)

        self.audit_logger.log(tool=self.name, inputs=payload, outcome="success", success=True)
        return {"success": True, "tool": self.name, "data": data}

    @abstractmethod
    def _run(self, args: Any) -> Any:
        """Tool-specific execution logic."""

    def _failure(self, payload: dict[str, Any], outcome: str, reason: str) -> dict[str, Any]:
        self.audit_logger.log(
            tool=self.name, inputs=payload, outcome="failed", success=False, reason=reason
        )
        return {"success": False, "tool": self.name, "outcome": outcome}
