"""Logging setup for TinyLink processes."""

import json
import logging
import sys
from typing import Optional

ROOT_LOGGER = "tinylink"

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, safe for messages containing quotes."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> logging.Logger:
    """Configure the ``tinylink`` logger tree and return its root.

    Every module logs under ``tinylink.*`` (or receives this logger directly),
    so handlers are attached once here. Calling it again replaces them.

    Args:
        level: Level name; unknown names fall back to INFO
        log_file: Also append to this file when given
        json_format: Emit JSON lines instead of plain text
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if json_format:
        formatter: logging.Formatter = JsonLineFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(numeric_level)
    logger.propagate = False
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
