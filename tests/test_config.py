from __future__ import annotations

import importlib
from typing import Any

import pytest
from fastapi import FastAPI

from taskapi.config import build_store, load_config
from taskapi.tasks.store import InMemoryTaskStore, RedisTaskStore


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TASKAPI_HOST", "TASKAPI_PORT", "TASK_STORE", "TASK_STORE_PREFIX", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    cfg = load_config()

    assert cfg.host == "0.0.0.0"
    assert cfg.port == 8000
    assert cfg.store_backend == "memory"
    assert cfg.key_prefix == "tasks"
    assert cfg.log_level == "info"
    assert isinstance(build_store(cfg), InMemoryTaskStore)


def test_overrides_and_redis_backend() -> None:
    cfg = load_config(
        {
            "TASKAPI_PORT": "0",
            "TASK_STORE": "Redis",
            "REDIS_URL": "redis://example:6380/2",
            "TASK_STORE_PREFIX": "t1",
        }
    )

    assert cfg.port == 0
    assert cfg.store_backend == "redis"
    # from_url does not connect until the first command
    assert isinstance(build_store(cfg), RedisTaskStore)


@pytest.mark.parametrize("raw", ["abc", "-1", "70000"])
def test_invalid_port_falls_back(raw: str) -> None:
    assert load_config({"TASKAPI_PORT": raw}).port == 8000


def test_unknown_backend_is_rejected() -> None:
    with pytest.raises(ValueError):
        load_config({"TASK_STORE": "sqlite"})


def test_asgi_module_exposes_app(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASK_STORE", "memory")
    module = importlib.import_module("taskapi.gateway.asgi")
    assert isinstance(module.app, FastAPI)


def test_main_runs_uvicorn_with_configured_port(monkeypatch: pytest.MonkeyPatch) -> None:
    from taskapi.gateway import __main__ as entry

    ran: list[Any] = []

    class _FakeServer:
        def __init__(self, config: Any) -> None:
            self.config = config

        def run(self) -> None:
            ran.append(self.config)

    monkeypatch.setenv("TASK_STORE", "memory")
    monkeypatch.setenv("TASKAPI_HOST", "127.0.0.1")
    monkeypatch.setenv("TASKAPI_PORT", "18080")
    monkeypatch.setattr(entry.uvicorn, "Server", _FakeServer)

    entry.main()

    assert len(ran) == 1
    assert ran[0].host == "127.0.0.1"
    assert ran[0].port == 18080
