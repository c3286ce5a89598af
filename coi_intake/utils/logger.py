"""Logging setup for the COI intake system.

Parsing and matching code logs through named module loggers; entry
points (CLI, API server) call :func:`setup_logging` once to attach a
handler to the root logger.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Configure the root logger once.

    Later calls leave existing handlers alone, so entry points and tests
    can call this freely.

    Args:
        level: Logging level name. Unknown names fall back to INFO.
        log_file: Optional file receiving a copy of every record.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module, typically ``get_logger(__name__)``."""
    return logging.getLogger(name)
