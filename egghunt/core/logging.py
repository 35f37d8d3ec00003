"""
Logging setup for the egg hunt service.

Called once from ``egghunt.main.create_app``. Every other module just does
``logger = logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _parse_level(value: str | None) -> int:
    if not value:
        return logging.INFO
    level = getattr(logging, value.strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str | None = "INFO", *, force: bool = False) -> logging.Logger:
    """Initialize root logging and return the service logger."""
    logging.basicConfig(level=_parse_level(level), format=LOG_FORMAT, force=force)
    logger = logging.getLogger("egghunt")
    logger.setLevel(_parse_level(level))
    return logger
