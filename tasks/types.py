"""Task and task-list models shared by the service and the dependency engine."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_PRIORITY = 3
HIGH_PRIORITY = 4


def utc_now() -> datetime:
    """Return UTC datetime for default timestamps."""
    return datetime.now(UTC)


def new_id() -> str:
    return uuid.uuid4().hex


class TaskStatus(str, Enum):
    """Lifecycle state of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


class Task(BaseModel):
    """Single task inside a list."""

    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: int = Field(default=DEFAULT_PRIORITY, ge=1, le=5)
    dependencies: list[str] = Field(default_factory=list)
    estimated_duration: int | None = Field(default=None, gt=0)  # minutes
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None


class TaskList(BaseModel):
    """Ordered collection of tasks; the unit handed to the dependency engine."""

    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    tasks: list[Task] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def get_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None
