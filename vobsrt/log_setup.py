"""Logging configuration for VobSrt."""

import logging
import sys
from logging.handlers import RotatingFileHandler
import os
from typing import Iterable, Optional
from .utils import ensure_dir_exists

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# PIL logs every PNG chunk it reads at DEBUG.
QUIET_LIBRARIES = ("PIL",)

def setup_logging(
    log_level: int = logging.INFO,
    log_dir: Optional[str] = "logs",
    log_file: Optional[str] = "vobsrt.log",
    file_level: int = logging.DEBUG,
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    max_bytes: int = 10 * 1024 * 1024, # 10 MB
    backup_count: int = 5,
    quiet_libraries: Iterable[str] = QUIET_LIBRARIES
) -> Optional[str]:
    """
    Routes the root logger to stdout and, optionally, to a rotating file.

    The console shows log_level and above. The file keeps file_level and
    above (DEBUG by default) so per-frame recognition output is on disk even
    without --verbose. Calling this again replaces the previous handlers,
    which is how the CLI switches from console-only to the configured file.

    Args:
        log_level: Console level (logging.INFO, or logging.DEBUG for --verbose).
        log_dir: Directory for the log file. None or empty disables the file.
        log_file: Log file name. None or empty disables the file.
        file_level: Level of the file handler.
        log_format: The format string for log messages.
        date_format: The format string for timestamps in logs.
        max_bytes: Maximum size of a log file before rotation.
        backup_count: Number of backup log files to keep.
        quiet_libraries: Logger names held at WARNING.

    Returns:
        The log file path, or None when logging to the console only or when
        the file could not be opened.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    formatter = logging.Formatter(log_format, datefmt=date_format)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    console.setLevel(log_level)
    root.addHandler(console)
    root.setLevel(log_level)

    log_path = None
    if log_dir and log_file:
        try:
            ensure_dir_exists(log_dir)
            log_path = os.path.join(log_dir, log_file)
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8'
            )
        except Exception as e:
            root.error(f"Failed to set up file logging at {log_dir}/{log_file}: {e}; logging to console only")
            log_path = None
        else:
            file_handler.setFormatter(formatter)
            file_handler.setLevel(file_level)
            root.addHandler(file_handler)
            root.setLevel(min(log_level, file_level))
            root.debug(f"Logging initialized. Log file: {log_path}")

    for name in quiet_libraries:
        logging.getLogger(name).setLevel(logging.WARNING)
    return log_path
