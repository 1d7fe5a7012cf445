"""Logging for the API server and the settlement job.

The level is ``Settings.log_level`` (LOG_LEVEL in the environment or .env);
both entry points log to stdout and, if given, to their own log file.
"""

import logging
import sys
from pathlib import Path

from messmate.config import get_settings

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(log_file: str | None = None, level: str | None = None) -> int:
    """Send every record to stdout and optionally ``log_file``.

    Args:
        log_file: Path of the log file (parent directories are created), or
            None for stdout only
        level: Level name overriding the configured one

    Returns:
        The numeric level applied to the root logger and its handlers
    """
    level_name = (level or get_settings().log_level).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    root_logger = logging.getLogger()
    # Re-running setup (tests, reloads) replaces handlers instead of stacking them
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(log_level)
    return log_level


__all__ = ["configure_logging"]
