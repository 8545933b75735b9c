from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOG_LEVEL = "WARNING"


def setup_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    normalized = level.upper()
    if normalized not in LOG_LEVELS:
        raise ValueError(f"unsupported log level: {level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(normalized)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stderr keeps the tool's key=value report on stdout clean.
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(normalized)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
