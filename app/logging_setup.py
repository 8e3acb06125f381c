from __future__ import annotations

import logging
import os
from typing import Optional

from core.config import ENV_LOG_LEVEL

ROOT_NAMES = ("app", "core", "storage")
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_setup_done = False


def _level_from_env() -> int:
    raw = os.environ.get(ENV_LOG_LEVEL, "").strip().upper()
    return getattr(logging, raw, logging.INFO)


def setup_logging(level: Optional[str] = None) -> None:
    """Attach one console handler to the project loggers. Safe to call twice."""
    global _setup_done
    if _setup_done:
        return

    level_int = getattr(logging, level.upper(), logging.INFO) if level else _level_from_env()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    for name in ROOT_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level_int)
        logger.addHandler(handler)
    _setup_done = True
