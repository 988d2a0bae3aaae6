from __future__ import annotations

import uuid
from collections.abc import Generator
from typing import Any

import pytest
import redis

from taskapi.tasks.errors import StoreError
from taskapi.tasks.store import RedisTaskStore


@pytest.fixture()
def key_prefix() -> str:
    return f"testtasks:{uuid.uuid4()}"


@pytest.fixture()
def redis_store(redis_url: str, key_prefix: str) -> Generator[RedisTaskStore, None, None]:
    s = RedisTaskStore(url=redis_url, key_prefix=key_prefix)
    yield s
    s.delete_all()
    redis.Redis.from_url(redis_url).delete(f"{key_prefix}:seq")


def test_insert_and_list_persist_across_instances(
    redis_store: RedisTaskStore, redis_url: str, key_prefix: str
) -> None:
    t1 = redis_store.insert(name="task01", completed=True)
    t2 = redis_store.insert(name="Task02", completed=False)

    assert t1.id > 0 and t2.id > t1.id

    # Recreate store to simulate process restart
    store2 = RedisTaskStore(url=redis_url, key_prefix=key_prefix)
    assert store2.list_all() == [t1, t2]


def test_list_by_completed(redis_store: RedisTaskStore) -> None:
    todo = redis_store.insert(name="task01", completed=False)
    done = redis_store.insert(name="task02", completed=True)

    assert redis_store.list_by_completed(False) == [todo]
    assert redis_store.list_by_completed(True) == [done]


def test_delete_all_keeps_sequence(redis_store: RedisTaskStore) -> None:
    first = redis_store.insert(name="task01", completed=False)
    redis_store.delete_all()
    assert redis_store.list_all() == []

    second = redis_store.insert(name="task01", completed=False)
    assert second.id > first.id


def test_ping_ok(redis_store: RedisTaskStore) -> None:
    redis_store.ping()


class _DownClient:
    """Stand-in client whose every command fails like an unreachable server."""

    def __getattr__(self, name: str) -> Any:
        def _fail(*args: Any, **kwargs: Any) -> Any:
            raise redis.exceptions.ConnectionError("Connection refused")

        return _fail


def test_redis_errors_become_store_errors() -> None:
    s = RedisTaskStore(client=_DownClient(), key_prefix="down")

    with pytest.raises(StoreError):
        s.insert(name="task01", completed=False)
    with pytest.raises(StoreError):
        s.list_all()
    with pytest.raises(StoreError):
        s.delete_all()
    with pytest.raises(StoreError):
        s.ping()
