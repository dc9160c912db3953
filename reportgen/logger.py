"""
reportgen/logger.py — One logging setup for every reportgen module.

Usage:
    from .logger import get_logger

    logger = get_logger(__name__)
    logger.warning("Skipping mapping %r: %s", address, reason)

The "reportgen" logger gets a single stdout handler on first use; its level
comes from REPORTGEN_LOG_LEVEL (see config.resolve_log_level).
Messages do not propagate to the root logger.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

from .config import resolve_log_level

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER_NAME = "reportgen"

_root_configured = False


def _configure_root_logger() -> None:
    global _root_configured
    if _root_configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(resolve_log_level())
    root_logger.addHandler(handler)
    root_logger.propagate = False

    _root_configured = True


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Return a logger under the configured "reportgen" root."""
    _configure_root_logger()
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_level(level: int, logger_name: Optional[str] = None) -> None:
    """
    Set the level of one logger, or of the whole "reportgen" tree.

        set_level(logging.DEBUG)                       # everything
        set_level(logging.DEBUG, "reportgen.filler")   # fill algorithm only
    """
    logging.getLogger(logger_name or ROOT_LOGGER_NAME).setLevel(level)
