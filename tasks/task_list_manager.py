"""Task list service over SQLite, delegating dependency logic to the engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from dependency_engine.models import BlockedItem, DependencyValidationResult
from dependency_engine.resolver import DependencyResolver
from tasks.errors import DependencyValidationError, TaskListNotFoundError, TaskNotFoundError
from tasks.schemas import TaskListRecord, TaskRecord
from tasks.stores.sql_store import SQLStore
from tasks.types import Task, TaskList, TaskStatus, utc_now

logger = logging.getLogger("tgm.task_list_manager")

_UPDATABLE_FIELDS = {"title", "description", "status", "priority", "estimated_duration", "tags"}


class TaskListManager:
    """Creates, reads and mutates task lists; validates edges before committing."""

    def __init__(self, sql_store: SQLStore, resolver: DependencyResolver | None = None) -> None:
        self.sql_store = sql_store
        self.sql_store.create_all()
        self.resolver = resolver or DependencyResolver()

    # ── lists ────────────────────────────────────────────────────────

    def create_list(self, title: str, description: str = "") -> TaskList:
        """Insert an empty list."""
        task_list = TaskList(title=title, description=description)
        record = TaskListRecord(
            id=task_list.id,
            title=task_list.title,
            description=task_list.description,
            created_at=task_list.created_at,
            updated_at=task_list.updated_at,
        )
        with self.sql_store.session() as sess:
            sess.add(record)
        logger.info("Created task list %s (%s)", task_list.id, title)
        return task_list

    def get_list(self, list_id: str) -> TaskList:
        """Load one list with its tasks in insertion order."""
        with self.sql_store.session() as sess:
            return self._load_list(sess, list_id)

    def list_lists(self, limit: int = 50) -> list[TaskList]:
        """List task lists, most recently updated first."""
        with self.sql_store.session() as sess:
            rows = (
                sess.query(TaskListRecord)
                .order_by(TaskListRecord.updated_at.desc())
                .limit(limit)
                .all()
            )
            return [self._load_list(sess, row.id) for row in rows]

    def delete_list(self, list_id: str) -> None:
        """Delete a list and its tasks."""
        with self.sql_store.session() as sess:
            row = self._list_row(sess, list_id)
            sess.query(TaskRecord).filter(TaskRecord.list_id == list_id).delete()
            sess.delete(row)
        logger.info("Deleted task list %s", list_id)

    # ── tasks ────────────────────────────────────────────────────────

    def add_task(
        self,
        list_id: str,
        title: str,
        description: str = "",
        priority: int = 3,
        estimated_duration: int | None = None,
        tags: list[str] | None = None,
        dependencies: list[str] | None = None,
    ) -> Task:
        """Append a task; declared dependencies go through the validator first."""
        task = Task(
            title=title,
            description=description,
            priority=priority,
            estimated_duration=estimated_duration,
            tags=tags or [],
            dependencies=list(dependencies or []),
        )
        with self.sql_store.session() as sess:
            task_list = self._load_list(sess, list_id)
            if task.dependencies:
                self._check_dependencies(task.id, task.dependencies, task_list.tasks)
            last = (
                sess.query(func.max(TaskRecord.position))
                .filter(TaskRecord.list_id == list_id)
                .scalar()
            )
            position = 0 if last is None else last + 1
            sess.add(self._record_from_task(task, list_id, position))
            self._touch(sess, list_id)
        logger.info("Added task %s to list %s", task.id, list_id)
        return task

    def update_task(self, list_id: str, task_id: str, **changes: Any) -> Task:
        """Update plain task fields; dependencies use ``set_task_dependencies``."""
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported task fields: {', '.join(sorted(unknown))}")
        with self.sql_store.session() as sess:
            row = self._task_row(sess, list_id, task_id)
            current = self._task_from_record(row)
            updated = Task.model_validate({**current.model_dump(), **changes})
            row.title = updated.title
            row.description = updated.description
            row.priority = updated.priority
            row.estimated_duration = updated.estimated_duration
            row.tags = list(updated.tags)
            if updated.status != current.status:
                row.status = updated.status.value
                row.completed_at = utc_now() if updated.status == TaskStatus.COMPLETED else None
            row.updated_at = utc_now()
            self._touch(sess, list_id)
            sess.flush()
            return self._task_from_record(row)

    def complete_task(self, list_id: str, task_id: str) -> Task:
        """Mark a task completed."""
        return self.update_task(list_id, task_id, status=TaskStatus.COMPLETED)

    def remove_task(self, list_id: str, task_id: str) -> None:
        """Delete a task and drop it from every other task's dependencies."""
        with self.sql_store.session() as sess:
            row = self._task_row(sess, list_id, task_id)
            sess.delete(row)
            others = sess.query(TaskRecord).filter(TaskRecord.list_id == list_id).all()
            for other in others:
                if task_id in (other.dependencies or []):
                    other.dependencies = [d for d in other.dependencies if d != task_id]
                    other.updated_at = utc_now()
            self._touch(sess, list_id)
        logger.info("Removed task %s from list %s", task_id, list_id)

    # ── dependencies ─────────────────────────────────────────────────

    def validate_dependencies(
        self, list_id: str, task_id: str, dependency_ids: Sequence[str]
    ) -> DependencyValidationResult:
        """Dry-run a dependency replacement without committing it."""
        task_list = self.get_list(list_id)
        self._require_task(task_list, task_id)
        return self.resolver.validate(task_id, dependency_ids, task_list.tasks)

    def set_task_dependencies(
        self, list_id: str, task_id: str, dependency_ids: Sequence[str]
    ) -> tuple[Task, DependencyValidationResult]:
        """Replace a task's dependencies after validating the new edge set.

        An empty sequence clears all dependencies.
        """
        with self.sql_store.session() as sess:
            task_list = self._load_list(sess, list_id)
            self._require_task(task_list, task_id)
            result = self._check_dependencies(task_id, dependency_ids, task_list.tasks)
            row = self._task_row(sess, list_id, task_id)
            row.dependencies = list(dependency_ids)
            row.updated_at = utc_now()
            self._touch(sess, list_id)
            sess.flush()
            task = self._task_from_record(row)
        logger.info(
            "Dependencies set for task %s in list %s: count=%d warnings=%d",
            task_id,
            list_id,
            len(task.dependencies),
            len(result.warnings),
        )
        return task, result

    def set_bulk_dependencies(
        self, list_id: str, changes: Mapping[str, Sequence[str]]
    ) -> dict[str, DependencyValidationResult]:
        """Replace dependencies of several tasks atomically.

        Changes are checked in the given order, each against the snapshot with
        the earlier changes already applied. Any rejection raises before a row
        is written, so either every change is committed or none is.
        """
        results: dict[str, DependencyValidationResult] = {}
        with self.sql_store.session() as sess:
            task_list = self._load_list(sess, list_id)
            working = list(task_list.tasks)
            index = {task.id: pos for pos, task in enumerate(working)}
            for task_id, dependency_ids in changes.items():
                if task_id not in index:
                    raise TaskNotFoundError(task_id, list_id)
                results[task_id] = self._check_dependencies(task_id, dependency_ids, working)
                pos = index[task_id]
                working[pos] = working[pos].model_copy(
                    update={"dependencies": list(dependency_ids)}
                )
            now = utc_now()
            for task_id, dependency_ids in changes.items():
                row = self._task_row(sess, list_id, task_id)
                row.dependencies = list(dependency_ids)
                row.updated_at = now
            self._touch(sess, list_id)
        logger.info("Bulk dependencies set for %d tasks in list %s", len(changes), list_id)
        return results

    def clear_bulk_dependencies(self, list_id: str, task_ids: Sequence[str]) -> int:
        """Drop every dependency of the given tasks; returns how many were cleared."""
        self.set_bulk_dependencies(list_id, {task_id: [] for task_id in task_ids})
        return len(set(task_ids))

    def suggest_task_order(self, list_id: str) -> list[Task]:
        """Whole list in suggested work order."""
        task_list = self.get_list(list_id)
        ordered = self.resolver.suggest_order(task_list.tasks)
        logger.info("Task order suggested for list %s: %d tasks", list_id, len(ordered))
        return ordered

    def get_ready_tasks(self, list_id: str) -> list[Task]:
        return self.resolver.ready_items(self.get_list(list_id).tasks)

    def get_blocked_tasks(self, list_id: str) -> list[BlockedItem]:
        return self.resolver.blocked_items(self.get_list(list_id).tasks)

    def get_critical_path(self, list_id: str) -> list[Task]:
        """Critical path resolved to task objects, prerequisite first."""
        task_list = self.get_list(list_id)
        return [
            task
            for task_id in self.resolver.critical_path(task_list.tasks)
            if (task := task_list.get_task(task_id)) is not None
        ]

    def _check_dependencies(
        self, task_id: str, dependency_ids: Sequence[str], tasks: Sequence[Task]
    ) -> DependencyValidationResult:
        result = self.resolver.validate(task_id, dependency_ids, tasks)
        if not result.is_valid:
            logger.warning(
                "Dependency validation failed for task %s: %s", task_id, "; ".join(result.errors)
            )
            raise DependencyValidationError(task_id, result)
        if result.warnings:
            logger.warning(
                "Dependency validation warnings for task %s: %s",
                task_id,
                "; ".join(result.warnings),
            )
        return result

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _require_task(task_list: TaskList, task_id: str) -> Task:
        task = task_list.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id, task_list.id)
        return task

    @staticmethod
    def _list_row(sess: Session, list_id: str) -> TaskListRecord:
        row = sess.get(TaskListRecord, list_id)
        if row is None:
            raise TaskListNotFoundError(list_id)
        return row

    @staticmethod
    def _task_row(sess: Session, list_id: str, task_id: str) -> TaskRecord:
        row = sess.get(TaskRecord, task_id)
        if row is None or row.list_id != list_id:
            raise TaskNotFoundError(task_id, list_id)
        return row

    def _touch(self, sess: Session, list_id: str) -> None:
        self._list_row(sess, list_id).updated_at = utc_now()

    def _load_list(self, sess: Session, list_id: str) -> TaskList:
        row = self._list_row(sess, list_id)
        task_rows = (
            sess.query(TaskRecord)
            .filter(TaskRecord.list_id == list_id)
            .order_by(TaskRecord.position.asc(), TaskRecord.created_at.asc())
            .all()
        )
        return TaskList(
            id=row.id,
            title=row.title,
            description=row.description,
            tasks=[self._task_from_record(task_row) for task_row in task_rows],
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _record_from_task(task: Task, list_id: str, position: int) -> TaskRecord:
        return TaskRecord(
            id=task.id,
            list_id=list_id,
            position=position,
            title=task.title,
            description=task.description,
            status=task.status.value,
            priority=task.priority,
            dependencies=list(task.dependencies),
            estimated_duration=task.estimated_duration,
            tags=list(task.tags),
            created_at=task.created_at,
            updated_at=task.updated_at,
            completed_at=task.completed_at,
        )

    @staticmethod
    def _task_from_record(row: TaskRecord) -> Task:
        return Task(
            id=row.id,
            title=row.title,
            description=row.description,
            status=TaskStatus(row.status),
            priority=row.priority,
            dependencies=list(row.dependencies or []),
            estimated_duration=row.estimated_duration,
            tags=list(row.tags or []),
            created_at=row.created_at,
            updated_at=row.updated_at,
            completed_at=row.completed_at,
        )
