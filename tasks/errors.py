"""Errors raised by the task-list service around the dependency engine."""

from __future__ import annotations

from dependency_engine.models import DependencyValidationResult


class TaskListNotFoundError(LookupError):
    """Raised when a list id does not resolve."""

    def __init__(self, list_id: str) -> None:
        super().__init__(f"Task list {list_id} not found")
        self.list_id = list_id


class TaskNotFoundError(LookupError):
    """Raised when a task id does not resolve inside its list."""

    def __init__(self, task_id: str, list_id: str) -> None:
        super().__init__(f"Task {task_id} not found in list {list_id}")
        self.task_id = task_id
        self.list_id = list_id


class DependencyValidationError(ValueError):
    """A dependency change was rejected by the validator."""

    def __init__(self, task_id: str, result: DependencyValidationResult) -> None:
        super().__init__(format_validation_message(result))
        self.task_id = task_id
        self.result = result

    @property
    def code(self) -> str:
        """Code of the most severe error, ranked like the validator's checks."""
        for prefix, code in _ERROR_CODES:
            if any(e.startswith(prefix) for e in self.result.errors):
                return code
        return "DEPENDENCY_VALIDATION_ERROR"


_ERROR_CODES = (
    ("Self-dependency", "SELF_DEPENDENCY_ERROR"),
    ("Invalid dependencies", "INVALID_DEPENDENCY_ERROR"),
    ("Duplicate dependencies", "DUPLICATE_DEPENDENCY_ERROR"),
    ("Circular dependency", "CIRCULAR_DEPENDENCY_ERROR"),
)


def format_validation_message(result: DependencyValidationResult) -> str:
    """Render errors, warnings and fix suggestions as plain text."""
    lines: list[str] = []
    if result.errors:
        lines.append("Dependency validation failed:")
        lines.extend(f"  - {error}" for error in result.errors)
    if result.warnings:
        lines.append("Warnings:")
        lines.extend(f"  - {warning}" for warning in result.warnings)

    suggestions: list[str] = []
    if any(e.startswith("Invalid dependencies") for e in result.errors):
        suggestions.append("Verify that every dependency id exists in the same list")
    if any(e.startswith("Self-dependency") for e in result.errors):
        suggestions.append("Remove the task's own id from its dependencies")
    if any(e.startswith("Duplicate dependencies") for e in result.errors):
        suggestions.append("List each dependency only once")
    if result.circular_dependencies:
        suggestions.append("Remove one or more dependencies to break the circular chain")
    if suggestions:
        lines.append("Suggestions:")
        lines.extend(f"  - {suggestion}" for suggestion in suggestions)
    return "\n".join(lines)
