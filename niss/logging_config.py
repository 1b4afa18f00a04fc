"""
Logging setup for the NISS engine and the batch screener.

All output goes through the ``niss`` logger (one stdout handler). The level
comes from the caller, else from ``NISS_LOG_LEVEL``, else INFO.

Usage:
    from niss.logging_config import get_logger

    logger = get_logger("risk")          # -> "niss.risk"
    logger = get_logger(__name__)        # "niss.screener" stays "niss.screener"
"""
import logging
import os
import sys
from typing import Optional, Union

ROOT_LOGGER = "niss"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_logger: Optional[logging.Logger] = None


def parse_level(level_name: Union[str, int, None]) -> int:
    """Map a level name such as "debug" (or a logging constant) to its int; INFO if unknown."""
    if isinstance(level_name, int):
        return level_name
    if not level_name:
        return logging.INFO
    value = logging.getLevelName(str(level_name).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: Union[str, int, None] = None, name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Configure the package logger once; later calls only change the level.

    Args:
        level: Level name or constant; None reads NISS_LOG_LEVEL (default INFO)
        name: Logger name

    Returns:
        Configured logger instance
    """
    global _logger

    resolved = parse_level(level if level is not None else os.getenv("NISS_LOG_LEVEL"))

    if _logger is None:
        _logger = logging.getLogger(name)
        _logger.handlers.clear()
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        _logger.addHandler(handler)
        _logger.propagate = False

    _logger.setLevel(resolved)
    for handler in _logger.handlers:
        handler.setLevel(resolved)
    return _logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child of the package logger; a module path already under ``niss.`` is used as is."""
    root = _logger or setup_logging()
    if not name or name == root.name:
        return root
    prefix = f"{root.name}."
    return root.getChild(name[len(prefix):] if name.startswith(prefix) else name)
