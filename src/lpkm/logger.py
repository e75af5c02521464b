"""
Structured logging for LPKM.
Log lines are JSON objects with UTC timestamps, written to stderr so that
command output on stdout stays machine-readable.
"""

import json
import logging
import os
import sys
import time
from typing import Optional, Union

from .config import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV, LOGGER_NAME


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    converter = time.gmtime

    def __init__(self, datefmt: str = "%Y-%m-%dT%H:%M:%SZ"):
        super().__init__(datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.WARNING
    return level


def get_logger(name: str = LOGGER_NAME, level: Optional[Union[int, str]] = None, to_file: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the LPKM namespace.

    Handlers are attached once, to the root "lpkm" logger; child loggers
    ("lpkm.manager", ...) propagate to it.

    Args:
        name: Logger name
        level: Level name or number; defaults to $LPKM_LOG_LEVEL or WARNING
        to_file: Optional path of an additional log file

    Returns:
        Configured logger
    """
    root = logging.getLogger(LOGGER_NAME)

    if not root.handlers:
        root.setLevel(_resolve_level(level))

        formatter = JsonFormatter()

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        root.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(os.path.abspath(to_file)), exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
    elif level is not None:
        root.setLevel(_resolve_level(level))

    if name == LOGGER_NAME:
        return root
    return logging.getLogger(name)
