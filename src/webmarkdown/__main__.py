"""Run the service under uvicorn: ``python -m webmarkdown``."""

from __future__ import annotations

import uvicorn
import structlog

from .config import get_settings
from .logging import configure_logging

logger = structlog.get_logger(__name__)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.logging)
    logger.info("webmarkdown_listening", url=f"http://{settings.host}:{settings.port}")
    uvicorn.run(
        "webmarkdown.app:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
