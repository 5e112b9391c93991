#!/usr/bin/env python3
"""Start the Rooster API with Uvicorn. Settings come from the environment / .env."""

import logging
import os
import sys

import uvicorn

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from core.config import LOG_LEVEL, configure_logging  # noqa: E402

logger = logging.getLogger("rooster.run")


def serve() -> None:
    host = os.getenv("APP_HOST", "127.0.0.1")
    port = int(os.getenv("APP_PORT", "3001"))
    # Auto-reload is for local development only
    reload = os.getenv("APP_RELOAD", "false").lower() in ("true", "1", "t")

    configure_logging()
    logger.info("Serving on %s:%s (reload=%s)", host, port, reload)

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=LOG_LEVEL.lower(),
        app_dir=PROJECT_ROOT,
        reload_dirs=[PROJECT_ROOT] if reload else None,
    )


if __name__ == "__main__":
    serve()
