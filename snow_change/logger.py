"""Log stream setup for ServiceNow change automation.

Text lines look like ``[2025-01-31 12:00:00] [INFO] Created CR: CHG0012345``.
Values passed as ``extra={'context': {...}}`` are appended in parentheses,
or become a ``context`` object in JSON mode.
"""

import json
import logging
import sys
from pathlib import Path
from typing import List

from snow_change.config import LoggingConfig

ROOT_LOGGER = "snow_change"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class TextFormatter(logging.Formatter):
    """``[timestamp] [LEVEL] message (key=value, ...)``"""

    def __init__(self):
        super().__init__(fmt="[%(asctime)s] [%(levelname)s] %(message)s", datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, 'context', None)
        if context:
            line += " (" + ", ".join(f"{k}={v}" for k, v in context.items()) + ")"
        return line


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, 'context', None)
        if context:
            entry["context"] = context
        return json.dumps(entry, default=str)


def _build_handlers(config: LoggingConfig) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if config.file:
        file_path = Path(config.file)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(file_path, encoding='utf-8'))

    return handlers


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """
    Route the package's log records to stdout and the optional log file.

    Raises:
        OSError: If the log file cannot be opened.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = JSONFormatter() if config.format.lower() == "json" else TextFormatter()

    handlers = _build_handlers(config)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False

    return logger
