"""Logging configuration using loguru.

Library modules log through ``loguru.logger`` directly.  The only stdlib
``logging`` traffic in this tool comes from asyncio, which is intercepted
into the same stderr sink.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

_USER_FORMAT = "<level>{level: <8}</level> | <level>{message}</level>"
_DEBUG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{thread.name}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class _InterceptHandler(logging.Handler):
    """Bridge stdlib logging records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "WARNING") -> None:
    """Configure loguru as the sole logging sink.

    Call this once per CLI invocation, before discovery starts.  At DEBUG the
    format adds timestamps, the thread (discovery walks on a pool) and the
    call site.
    """
    level = level.upper()
    debug = logger.level(level).no <= logger.level("DEBUG").no

    logger.remove()
    logger.add(sys.stderr, level=level, format=_DEBUG_FORMAT if debug else _USER_FORMAT)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    # asyncio reports selector and slow-callback details at DEBUG.
    logging.getLogger("asyncio").setLevel(logging.DEBUG if debug else logging.WARNING)

    logger.debug("Logging initialised (level={})", level)
