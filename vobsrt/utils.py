"""Utility functions for VobSrt."""

import os
import re
import shutil
import tempfile
import logging
from contextlib import contextmanager
from typing import Iterator, Optional
from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

SRT_TIME_PATTERN = re.compile(r'^(\d{2,}):(\d{2}):(\d{2}),(\d{3})$')

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path)
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def format_time_srt(milliseconds: int) -> str:
    """
    Formats milliseconds into SRT time format HH:MM:SS,mmm.

    Hours are zero-padded to two digits and grow past that when needed.

    Args:
        milliseconds: Time in milliseconds.

    Returns:
        Formatted time string.
    """
    if milliseconds < 0:
        milliseconds = 0 # Ensure non-negative time
    milliseconds = int(milliseconds)
    hrs = milliseconds // 3600000
    milliseconds %= 3600000
    mins = milliseconds // 60000
    milliseconds %= 60000
    secs = milliseconds // 1000
    milliseconds %= 1000
    return f"{hrs:02d}:{mins:02d}:{secs:02d},{milliseconds:03d}"

def parse_time_srt(value: str) -> int:
    """Inverse of format_time_srt: 'HH:MM:SS,mmm' -> milliseconds."""
    match = SRT_TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid SRT timestamp: {value!r}")
    hrs, mins, secs, millis = (int(part) for part in match.groups())
    return hrs * 3600000 + mins * 60000 + secs * 1000 + millis

def companion_payload_path(index_path: str) -> str:
    """Returns the .sub path that sits next to an .idx file."""
    base, ext = os.path.splitext(index_path)
    if ext.lower() == '.idx':
        return base + '.sub'
    return index_path + '.sub'

@contextmanager
def working_directory(parent_dir: Optional[str] = None, prefix: str = "vobsub-") -> Iterator[str]:
    """
    Creates a private working directory and removes it on every exit path.

    Args:
        parent_dir: Where to create the directory. None uses the system temp dir.
        prefix: Directory name prefix.

    Yields:
        The path of the created directory.

    Raises:
        FileSystemError: If the directory cannot be created.
    """
    if parent_dir:
        ensure_dir_exists(parent_dir)
    try:
        work_dir = tempfile.mkdtemp(prefix=prefix, dir=parent_dir)
    except OSError as e:
        raise FileSystemError(f"Could not create working directory in {parent_dir or tempfile.gettempdir()}: {e}") from e
    logger.debug(f"Created working directory: {work_dir}")
    try:
        yield work_dir
    finally:
        try:
            shutil.rmtree(work_dir)
            logger.debug(f"Cleaned up working directory: {work_dir}")
        except OSError as e:
            logger.warning(f"Could not remove working directory {work_dir}: {e}", exc_info=False)
