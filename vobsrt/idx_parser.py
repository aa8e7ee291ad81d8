"""Parses VobSub IDX index files for frame dimensions and track metadata."""

import logging
import os
import re
from typing import List

from .models import Metadata, DEFAULT_WIDTH, DEFAULT_HEIGHT
from .exceptions import InputAccessError

logger = logging.getLogger(__name__)

SIZE_PATTERN = re.compile(r'size:\s*(\d+)x(\d+)')
ID_PATTERN = re.compile(r'^id:\s*([^,\s]*)\s*,\s*index:\s*(\d+)')
PALETTE_PATTERN = re.compile(r'^palette:\s*(.*)$')
TIMESTAMP_PATTERN = re.compile(r'^timestamp:\s*\d+:\d+:\d+:\d+')

class IdxParser:
    """Extracts a Metadata record from IDX text."""

    def parse_text(self, content: str) -> Metadata:
        """
        Parses IDX file content.

        Only the `size: WxH` declaration matters for conversion. If it is
        missing (or declares a zero dimension) the 720x480 fallback is kept
        and rendering proceeds on the default canvas. Language id, palette
        and the count of declared timestamps are carried along for logging.

        Args:
            content: The full text of the IDX file.

        Returns:
            A Metadata instance.
        """
        width, height = DEFAULT_WIDTH, DEFAULT_HEIGHT
        size_match = SIZE_PATTERN.search(content)
        if size_match:
            parsed_width, parsed_height = int(size_match.group(1)), int(size_match.group(2))
            if parsed_width > 0 and parsed_height > 0:
                width, height = parsed_width, parsed_height
            else:
                logger.warning(f"Ignoring invalid size declaration {parsed_width}x{parsed_height}; using {width}x{height}")
        else:
            logger.warning(f"No size declaration found in IDX; using default {width}x{height}")

        language = None
        track_index = None
        palette: List[int] = []
        declared_entries = 0

        for line in content.splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith('#'):
                continue

            id_match = ID_PATTERN.match(stripped)
            if id_match and language is None:
                language = id_match.group(1) or None
                track_index = int(id_match.group(2))
                continue

            palette_match = PALETTE_PATTERN.match(stripped)
            if palette_match and not palette:
                for color in palette_match.group(1).split(','):
                    color = color.strip()
                    if not color:
                        continue
                    try:
                        palette.append(int(color, 16))
                    except ValueError:
                        logger.debug(f"Skipping malformed palette colour: {color!r}")
                continue

            if TIMESTAMP_PATTERN.match(stripped):
                declared_entries += 1

        metadata = Metadata(
            width=width,
            height=height,
            language=language,
            track_index=track_index,
            palette=tuple(palette),
            declared_entries=declared_entries,
        )
        logger.debug(f"Parsed IDX metadata: {metadata}")
        return metadata

    def parse_file(self, index_path: str) -> Metadata:
        """
        Reads and parses an IDX file.

        Raises:
            InputAccessError: If the file cannot be read.
        """
        logger.info(f"Reading IDX file: {index_path}")
        if not os.path.isfile(index_path):
            raise InputAccessError(f"IDX file not found: {index_path}")
        try:
            # latin-1 never fails to decode; IDX files are ASCII in practice.
            with open(index_path, 'r', encoding='latin-1') as f:
                content = f.read()
        except OSError as e:
            logger.error(f"Could not read IDX file {index_path}: {e}", exc_info=True)
            raise InputAccessError(f"Cannot access IDX file {index_path}: {e}") from e

        metadata = self.parse_text(content)
        logger.info(f"Video size: {metadata.width}x{metadata.height}"
                    + (f", language: {metadata.language}" if metadata.language else ""))
        return metadata
