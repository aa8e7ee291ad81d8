"""Materializes one raster image per subtitle slot."""

import logging
import os
from typing import List

from .exceptions import FileSystemError
from .models import Metadata, RasterFrame
from .renderer import SubtitleRenderer
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.png',)

class FrameExtractor:
    """Renders subtitle frames and recovers them in temporal order."""

    def __init__(self, renderer: SubtitleRenderer):
        self.renderer = renderer

    def collect_frames(self, frame_dir: str) -> List[RasterFrame]:
        """
        Lists rendered images in frame_dir, sorted by name.

        Frame names are zero-padded, so lexicographic order is temporal order
        and the position in this list is the slot of the matching timeline entry.
        """
        try:
            names = sorted(
                name for name in os.listdir(frame_dir)
                if name.lower().endswith(IMAGE_EXTENSIONS)
            )
        except OSError as e:
            raise FileSystemError(f"Could not list frame directory {frame_dir}: {e}") from e
        return [RasterFrame(slot=slot, path=os.path.join(frame_dir, name)) for slot, name in enumerate(names)]

    def extract(self, index_path: str, payload_path: str, metadata: Metadata, work_dir: str) -> List[RasterFrame]:
        """
        Renders frames into <work_dir>/frames and returns them in slot order.

        Raises:
            ExternalToolError: If the renderer fails. Never reported as zero frames.
            FileSystemError: If the frame directory cannot be created or listed.
        """
        frame_dir = os.path.join(work_dir, "frames")
        ensure_dir_exists(frame_dir)
        self.renderer.render(index_path, payload_path, metadata, frame_dir)
        frames = self.collect_frames(frame_dir)
        logger.info(f"Extracted {len(frames)} subtitle frames")
        return frames
