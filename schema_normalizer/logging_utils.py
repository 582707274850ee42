"""Console logging setup for the command-line entry point."""
from __future__ import annotations

import logging

SYSTEM_FMT = "[%(asctime)s] [%(levelname)s] %(message)s"
ROOT_LOGGER = "schema_normalizer"


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Attach a single console handler to the package logger.

    Repeated calls reset the handlers instead of stacking them.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers = []

    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter(SYSTEM_FMT))
    logger.addHandler(sh)
    return logger
