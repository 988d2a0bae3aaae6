from __future__ import annotations

import uvicorn

from taskapi.config import build_store, load_config
from taskapi.observability import get_json_logger

from .app import create_app


def main() -> None:
    cfg = load_config()
    store = build_store(cfg)
    app = create_app(store)
    get_json_logger("taskapi").info(
        "gateway starting",
        extra={
            "event": "gateway_start",
            "service": "gateway",
            "attributes": {"host": cfg.host, "port": cfg.port, "store": cfg.store_backend},
        },
    )
    server = uvicorn.Server(
        uvicorn.Config(app, host=cfg.host, port=cfg.port, log_level=cfg.log_level)
    )
    server.run()


if __name__ == "__main__":
    main()
