from __future__ import annotations

import itertools
import json
import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, cast

import redis

from .errors import StoreError
from .models import Task


class TaskStore:
    """Pluggable task store interface.

    Implementations assign positive, never-reused ids and list tasks in
    insertion order. A task is either fully visible to a listing or absent.
    """

    def insert(self, *, name: str, completed: bool) -> Task:  # pragma: no cover - interface only
        raise NotImplementedError

    def list_all(self) -> list[Task]:  # pragma: no cover - interface only
        raise NotImplementedError

    def list_by_completed(self, completed: bool) -> list[Task]:
        return [t for t in self.list_all() if t.completed is completed]

    def delete_all(self) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    def ping(self) -> None:
        """Raise StoreError when the backend is unreachable."""


class InMemoryTaskStore(TaskStore):
    """Process-local store guarded by a single lock."""

    def __init__(self) -> None:
        self._tasks: dict[int, Task] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    def insert(self, *, name: str, completed: bool) -> Task:
        with self._lock:
            task = Task(id=next(self._ids), name=name, completed=completed)
            self._tasks[task.id] = task
        return task

    def list_all(self) -> list[Task]:
        # dicts keep insertion order; copy under the lock for a stable snapshot
        with self._lock:
            return list(self._tasks.values())

    def list_by_completed(self, completed: bool) -> list[Task]:
        with self._lock:
            return [t for t in self._tasks.values() if t.completed is completed]

    def delete_all(self) -> None:
        with self._lock:
            self._tasks.clear()


class RedisTaskStore(TaskStore):
    """Redis-backed task store.

    Data structures:
    - String counter `{prefix}:seq` used with INCR for id assignment
    - Hash `{prefix}:tasks` with field=id and value=task JSON
    - List `{prefix}:order` of ids in insertion order

    Inserts write the hash field and the order entry in one MULTI/EXEC, and
    listings read both in one MULTI/EXEC, so readers see a consistent snapshot.
    `delete_all` keeps the counter so ids are never reused.
    """

    def __init__(
        self, *, url: str | None = None, key_prefix: str = "tasks", client: Any | None = None
    ) -> None:
        if client is not None:
            self._redis = client
        else:
            self._redis = redis.Redis.from_url(url or "redis://localhost:6379/0")
        self._prefix = key_prefix.rstrip(":")

    # key helpers
    @property
    def _seq_key(self) -> str:
        return f"{self._prefix}:seq"

    @property
    def _tasks_key(self) -> str:
        return f"{self._prefix}:tasks"

    @property
    def _order_key(self) -> str:
        return f"{self._prefix}:order"

    @contextmanager
    def _translate_errors(self, op: str) -> Generator[None, None, None]:
        try:
            yield
        except redis.exceptions.RedisError as exc:
            raise StoreError(f"redis {op} failed: {exc}") from exc

    @staticmethod
    def _text(value: bytes | str) -> str:
        return value.decode("utf-8") if isinstance(value, bytes) else value

    def insert(self, *, name: str, completed: bool) -> Task:
        with self._translate_errors("insert"):
            task_id = int(cast(int, self._redis.incr(self._seq_key)))
            task = Task(id=task_id, name=name, completed=completed)
            payload = json.dumps(task.model_dump(), separators=(",", ":"))
            p = self._redis.pipeline(transaction=True)
            p.hset(self._tasks_key, str(task_id), payload)
            p.rpush(self._order_key, str(task_id))
            p.execute()
        return task

    def list_all(self) -> list[Task]:
        with self._translate_errors("list"):
            p = self._redis.pipeline(transaction=True)
            p.lrange(self._order_key, 0, -1)
            p.hgetall(self._tasks_key)
            ids_raw, records_raw = p.execute()
        records = {self._text(k): self._text(v) for k, v in (records_raw or {}).items()}
        result: list[Task] = []
        for raw_id in ids_raw or []:
            data = records.get(self._text(raw_id))
            if data is None:
                continue
            result.append(Task.model_validate(json.loads(data)))
        return result

    def delete_all(self) -> None:
        with self._translate_errors("delete_all"):
            p = self._redis.pipeline(transaction=True)
            p.delete(self._tasks_key)
            p.delete(self._order_key)
            p.execute()

    def ping(self) -> None:
        with self._translate_errors("ping"):
            self._redis.ping()


__all__ = ["TaskStore", "InMemoryTaskStore", "RedisTaskStore"]
