from __future__ import annotations

from taskapi.observability import get_json_logger, get_metrics

from .errors import TaskValidationError
from .models import Task, TaskPayload
from .store import TaskStore


class TaskService:
    """Validation and dispatch between the HTTP layer and a TaskStore."""

    def __init__(self, store: TaskStore) -> None:
        self.store = store
        self._logger = get_json_logger("taskapi.tasks")

    def list_tasks(self, completed: bool | None = None) -> list[Task]:
        if completed is None:
            tasks = self.store.list_all()
        else:
            tasks = self.store.list_by_completed(completed)
        get_metrics().increment(
            "tasks_listed", {"filter": "all" if completed is None else str(completed).lower()}
        )
        return tasks

    def _require_fields(self, payload: TaskPayload) -> tuple[str, bool]:
        """Return (name, completed) or raise TaskValidationError listing every failure."""
        name, completed = payload.name, payload.completed
        if name is not None and name.strip() and completed is not None:
            return name, completed
        errors: list[tuple[str, str]] = []
        if completed is None:
            errors.append(("completed", "must not be null"))
        if name is None:
            errors.append(("name", "must not be null"))
        elif not name.strip():
            errors.append(("name", "must not be blank"))
        messages = [f"{field}: {reason}" for field, reason in sorted(errors)]
        self._logger.info(
            "task rejected",
            extra={"event": "task_validation_error", "attributes": {"errors": messages}},
        )
        get_metrics().increment("task_validation_errors")
        raise TaskValidationError(messages)

    def create_task(self, payload: TaskPayload) -> Task:
        name, completed = self._require_fields(payload)
        task = self.store.insert(name=name, completed=completed)
        self._logger.info("task created", extra={"event": "task_created", "task_id": task.id})
        get_metrics().increment("tasks_created")
        return task


__all__ = ["TaskService"]
