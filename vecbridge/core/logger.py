"""
vecbridge/core/logger.py

Logging setup shared by the whole package.

    from vecbridge.core.logger import get_logger
    logger = get_logger(__name__)

The root level comes from ``LOG_LEVEL`` (``DEBUG`` when ``DEBUG=true``).
The Milvus and HTTP client libraries log every RPC / request at INFO, so
they are capped at ``THIRD_PARTY_LOG_LEVEL``.
"""

import logging
import sys

from vecbridge.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Client libraries whose per-call logging drowns out ours.
_CHATTY_LOGGERS = ("pymilvus", "grpc", "httpx", "httpcore", "uvicorn.access")


def parse_level(name: str, fallback: int) -> int:
    """Map a level name such as ``"warning"`` to its number; unknown names give ``fallback``."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else fallback


def _resolve_level() -> int:
    if settings.debug:
        return logging.DEBUG
    return parse_level(settings.log_level, logging.INFO)


def _configure() -> None:
    root = logging.getLogger()
    level = _resolve_level()

    # pytest and uvicorn install their own handlers; only the level is ours then.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)

    third_party = parse_level(settings.third_party_log_level, logging.WARNING)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party)


_configure()


def get_logger(name: str) -> logging.Logger:
    """Return the named logger (normally ``__name__``)."""
    return logging.getLogger(name)
