"""
Logging setup for ctview, backed by loguru.

Modules obtain a bound logger with ``get_logger(__name__)``; entry points
call ``setup_logging`` once to pick the level and sink.
"""

import os
import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

logger.configure(extra={"name": "ctview"})


def setup_logging(level: str | None = None) -> None:
    """Replace the default loguru sink with a stderr sink at ``level``."""
    level = (level or os.getenv("CTVIEW_LOG_LEVEL") or "INFO").upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, backtrace=False)


def get_logger(name: str):
    """Return the shared loguru logger bound to a module name."""
    return logger.bind(name=name)


def mask_token(token: str | None) -> str:
    """Shorten a bearer token for log output."""
    if not token:
        return "<none>"
    if len(token) <= 8:
        return "***"
    return f"{token[:6]}…"
