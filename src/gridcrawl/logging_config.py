from __future__ import annotations

import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "GRIDCRAWL_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def level_for_verbosity(verbosity: int) -> int:
    """Map a ``-v`` count to a level: none -> WARNING, -v -> INFO, -vv -> DEBUG."""
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(default_level: int = logging.WARNING, env: Optional[str] = None) -> int:
    """Configure the root logger once for command-line use.

    The GRIDCRAWL_LOG_LEVEL environment variable (a level name such as
    ``debug``) wins over ``default_level``; unknown names are ignored. Library
    modules only create loggers and never call this. Returns the level used.
    """
    level_name = env if env is not None else os.getenv(LOG_LEVEL_ENV)
    level = default_level
    if level_name:
        candidate = logging.getLevelName(level_name.strip().upper())
        if isinstance(candidate, int):
            level = candidate
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    return level


__all__ = ["configure_logging", "level_for_verbosity", "LOG_LEVEL_ENV"]
