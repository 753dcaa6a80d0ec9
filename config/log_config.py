"""
config/log_config.py
Application logging: a rotating DEBUG log file in the temp dir, and stderr
at the requested level.
"""

import logging
import os
import sys
import tempfile
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

# Set by setup_logging(); shown in the status bar on startup.
LOG_FILE_PATH: Optional[str] = None

FILE_FORMAT    = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT    = "%Y-%m-%d %H:%M:%S"


def default_log_path() -> str:
    return os.path.join(tempfile.gettempdir(), "FolderPlayer", "player.log")


def _level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(
    level: Union[int, str] = "INFO",
    log_path: Optional[str] = None,
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 3,
    console: bool = True,
) -> Optional[str]:
    """
    Replace the root logger's handlers and return the log file path.

    The file gets every record; stderr only *level* and up. If the log file
    cannot be created, logging goes to stderr alone and None is returned.
    """
    global LOG_FILE_PATH
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    path = log_path or default_log_path()
    file_error: Optional[OSError] = None
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file_handler = RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8",
        )
    except OSError as e:
        file_error = e
        path = None
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(file_handler)

    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setLevel(_level(level))
        stream.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(stream)

    LOG_FILE_PATH = path
    log = logging.getLogger(__name__)
    if file_error is not None:
        log.warning("No log file: %s", file_error)
    log.info("Logging started (level=%s); file: %s",
             logging.getLevelName(_level(level)), path or "(none)")
    return path
