#!/usr/bin/env python3
"""Minimal Recordic server."""

from __future__ import annotations

import structlog
import uvicorn

from .config import Settings
from .logging import configure_logging
from .runtime import Recordic

logger = structlog.get_logger(__name__)


def main() -> None:
    settings = Settings.from_env()
    configure_logging(json_output=settings.log_json, level=settings.log_level)

    app = Recordic.create_app("recordic-server", db_url=settings.database_url)

    logger.info("starting recordic server", host=settings.host, port=settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
