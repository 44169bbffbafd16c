"""Module executed when running ``python -m reelcache``."""

from __future__ import annotations

import logging

import uvicorn

from .config import settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Serve the API with uvicorn, auto-reloading in development."""

    logging.basicConfig(level=logging.INFO)
    logger.info(
        "Starting %s on %s:%s with the %s cache backend",
        settings.app_name,
        settings.server_host,
        settings.server_port,
        settings.cache_backend,
    )
    uvicorn.run(
        "reelcache.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
        log_level="info",
    )


if __name__ == "__main__":  # pragma: no cover - runtime entrypoint
    main()
