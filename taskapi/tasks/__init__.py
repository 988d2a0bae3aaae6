from __future__ import annotations

from .errors import MalformedRequestError, StoreError, TaskApiError, TaskValidationError
from .models import ErrorResult, Task, TaskPayload
from .service import TaskService
from .store import InMemoryTaskStore, RedisTaskStore, TaskStore

__all__ = [
    "ErrorResult",
    "InMemoryTaskStore",
    "MalformedRequestError",
    "RedisTaskStore",
    "StoreError",
    "Task",
    "TaskApiError",
    "TaskPayload",
    "TaskService",
    "TaskStore",
    "TaskValidationError",
]
