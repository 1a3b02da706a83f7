"""Logging configuration."""

import logging
from typing import Optional

from demystifier.core.config import settings

# Chatty third-party loggers: the OpenAI SDK logs every request through httpx
QUIET_LOGGERS = ("httpx", "openai")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure application logging."""
    level = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # basicConfig is a no-op once uvicorn has configured the root logger
    logging.getLogger("demystifier").setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
