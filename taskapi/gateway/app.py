from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskapi.observability import (
    configure_uvicorn_logging,
    get_json_logger,
    get_metrics,
    new_request_id,
    use_request_context,
)
from taskapi.tasks.errors import MalformedRequestError, StoreError, TaskValidationError
from taskapi.tasks.models import ErrorResult, Task, TaskPayload
from taskapi.tasks.service import TaskService
from taskapi.tasks.store import TaskStore


def parse_completed_filter(raw: str | None) -> bool | None:
    """Parse the `completed` query parameter; only true/false are accepted."""
    if raw is None:
        return None
    value = raw.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    raise MalformedRequestError("completed: must be true or false")


def _error_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResult(message=message).model_dump(),
        headers=headers,
    )


def _format_request_errors(errors: Any) -> str:
    """Flatten FastAPI decoder errors into `<field>: <reason>` messages."""
    messages: list[str] = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query")]
        # json_invalid carries the byte offset as its location
        field = "body" if err.get("type") == "json_invalid" else ".".join(loc) or "body"
        messages.append(f"{field}: {err.get('msg', 'invalid value')}")
    return ", ".join(sorted(messages)) or "malformed request"


def create_app(store: TaskStore) -> FastAPI:
    app = FastAPI(title="taskapi")
    # Configure uvicorn logging at app creation to avoid import-time side effects
    configure_uvicorn_logging()
    logger = get_json_logger("taskapi.gateway")
    metrics = get_metrics()
    service = TaskService(store)

    # ----------------------------
    # Request context + access log
    # ----------------------------
    @app.middleware("http")
    async def request_context(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or new_request_id()
        path = request.url.path
        start = time.perf_counter()
        with use_request_context(request_id, request.method, path):
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    "gateway unexpected error",
                    extra={"event": "gateway_error", "service": "gateway"},
                )
                metrics.increment("gateway_unexpected_errors", {"path": path})
                response = _error_response(500, "internal server error")
            duration_ms = (time.perf_counter() - start) * 1000.0
            logger.info(
                "http request",
                extra={
                    "event": "http_request",
                    "service": "gateway",
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 3),
                },
            )
        metrics.increment(
            "http_requests", {"method": request.method, "status": str(response.status_code)}
        )
        response.headers["X-Request-ID"] = request_id
        return response

    # ----------------------------
    # Error mapping
    # ----------------------------
    @app.exception_handler(TaskValidationError)
    async def _on_validation_error(request: Request, exc: TaskValidationError) -> JSONResponse:
        logger.info(
            "gateway rejected task",
            extra={"event": "validation_error", "attributes": {"errors": exc.errors}},
        )
        metrics.increment("gateway_validation_errors", {"path": request.url.path})
        return _error_response(400, exc.message)

    @app.exception_handler(MalformedRequestError)
    async def _on_malformed(request: Request, exc: MalformedRequestError) -> JSONResponse:
        logger.info(
            "gateway malformed request",
            extra={"event": "malformed_request", "attributes": {"error": exc.message}},
        )
        metrics.increment("malformed_requests", {"path": request.url.path})
        return _error_response(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _on_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _format_request_errors(exc.errors())
        logger.info(
            "gateway malformed request",
            extra={"event": "malformed_request", "attributes": {"error": message[:200]}},
        )
        metrics.increment("malformed_requests", {"path": request.url.path})
        return _error_response(400, message)

    @app.exception_handler(StoreError)
    async def _on_store_error(request: Request, exc: StoreError) -> JSONResponse:
        logger.error(
            "gateway store error",
            extra={
                "event": "gateway_error",
                "service": "gateway",
                "attributes": {"error": exc.message[:200]},
            },
        )
        metrics.increment("task_store_errors", {"path": request.url.path})
        return _error_response(500, "task store unavailable")

    @app.exception_handler(StarletteHTTPException)
    async def _on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        headers = dict(exc.headers) if exc.headers else None
        logger.info(
            "gateway http error",
            extra={"event": "http_error", "status": exc.status_code},
        )
        metrics.increment(
            "http_errors", {"path": request.url.path, "status": str(exc.status_code)}
        )
        return _error_response(exc.status_code, str(exc.detail), headers=headers)

    # ----------------------------
    # Probes
    # ----------------------------
    @app.get("/health")
    async def health() -> dict[str, str]:  # lightweight healthcheck endpoint
        return {"status": "ok"}

    @app.get("/ready")
    async def ready() -> dict[str, str]:
        try:
            await asyncio.to_thread(store.ping)
        except StoreError as exc:
            logger.error(
                "gateway not ready",
                extra={"event": "gateway_error", "service": "gateway", "path": "ready"},
            )
            metrics.increment("gateway_ready_errors", {})
            raise HTTPException(status_code=503, detail="task store not ready") from exc
        return {"status": "ok"}

    # ----------------------------
    # Tasks
    # ----------------------------
    @app.get("/tasks", response_model=list[Task])
    async def list_tasks(completed: str | None = None) -> list[Task]:
        flag = parse_completed_filter(completed)
        return await asyncio.to_thread(service.list_tasks, flag)

    @app.post("/tasks", status_code=201, response_model=Task)
    async def create_task(payload: TaskPayload) -> Task:
        return await asyncio.to_thread(service.create_task, payload)

    return app


__all__ = ["create_app", "parse_completed_filter"]
