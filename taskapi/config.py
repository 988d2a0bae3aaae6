from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from taskapi.tasks.store import InMemoryTaskStore, RedisTaskStore, TaskStore

STORE_BACKENDS = ("memory", "redis")


@dataclass(slots=True)
class ServiceConfig:
    host: str
    port: int
    store_backend: str
    redis_url: str
    key_prefix: str
    log_level: str


def _read_port(raw: str | None, default: int = 8000) -> int:
    value = (raw or "").strip()
    if not value:
        return default
    try:
        port = int(value)
    except ValueError:
        return default
    # 0 asks the OS for a free port
    return port if 0 <= port <= 65535 else default


def load_config(env: dict[str, str] | None = None) -> ServiceConfig:
    e: dict[str, Any] = dict(os.environ)
    if env:
        e.update(env)
    backend = (e.get("TASK_STORE") or "memory").strip().lower()
    if backend not in STORE_BACKENDS:
        raise ValueError(f"TASK_STORE must be one of {', '.join(STORE_BACKENDS)}, got {backend!r}")
    return ServiceConfig(
        host=e.get("TASKAPI_HOST", "0.0.0.0"),
        port=_read_port(e.get("TASKAPI_PORT")),
        store_backend=backend,
        redis_url=e.get("REDIS_URL", "redis://localhost:6379/0"),
        key_prefix=e.get("TASK_STORE_PREFIX", "tasks"),
        log_level=(e.get("LOG_LEVEL") or "info").strip().lower(),
    )


def build_store(config: ServiceConfig) -> TaskStore:
    if config.store_backend == "redis":
        return RedisTaskStore(url=config.redis_url, key_prefix=config.key_prefix)
    return InMemoryTaskStore()


__all__ = ["ServiceConfig", "load_config", "build_store"]
