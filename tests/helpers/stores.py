from __future__ import annotations

from taskapi.tasks.errors import StoreError
from taskapi.tasks.models import Task
from taskapi.tasks.store import InMemoryTaskStore


class UnavailableStore(InMemoryTaskStore):
    """Store whose backend is down: every operation raises StoreError."""

    def insert(self, *, name: str, completed: bool) -> Task:
        raise StoreError("connection refused")

    def list_all(self) -> list[Task]:
        raise StoreError("connection refused")

    def list_by_completed(self, completed: bool) -> list[Task]:
        raise StoreError("connection refused")

    def ping(self) -> None:
        raise StoreError("connection refused")


class BrokenStore(InMemoryTaskStore):
    """Store that fails with an error the gateway does not know about."""

    def list_all(self) -> list[Task]:
        raise RuntimeError("boom")
