"""Drives ffmpeg to probe and rasterize VobSub subtitle streams."""

import ffmpeg
import os
import logging
from abc import ABC, abstractmethod
from typing import Optional

from .exceptions import ExternalToolError
from .models import Metadata

logger = logging.getLogger(__name__)

FRAME_PATTERN = "subtitle_frame_%04d.png"

class SubtitleRenderer(ABC):
    """Abstract base class for the external subtitle renderer."""

    @abstractmethod
    def probe(self, index_path: str, payload_path: str) -> str:
        """
        Runs the renderer in timing-probe mode.

        Returns:
            The renderer's diagnostic log, one frame report per line.

        Raises:
            ExternalToolError: If the renderer fails.
        """
        pass

    @abstractmethod
    def render(self, index_path: str, payload_path: str, metadata: Metadata, frame_dir: str) -> None:
        """
        Writes one PNG per subtitle frame into frame_dir.

        Raises:
            ExternalToolError: If the renderer fails.
        """
        pass


class FFmpegRenderer(SubtitleRenderer):
    """Implements the renderer with ffmpeg via ffmpeg-python."""

    def __init__(self, ffmpeg_path: Optional[str] = None):
        """
        Initializes the FFmpegRenderer.

        Args:
            ffmpeg_path: Optional path to the ffmpeg executable.
                         If None, assumes ffmpeg is in the system PATH.
        """
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        logger.info(f"Using ffmpeg command: {self.ffmpeg_cmd}")

    def _subtitle_input(self, index_path: str, payload_path: str):
        # The vobsub demuxer reads the .sub payload named by its sub_name option.
        return ffmpeg.input(index_path, sub_name=payload_path)

    def build_probe(self, index_path: str, payload_path: str):
        """Builds the showinfo probe graph (exposed for inspection in tests)."""
        return (
            self._subtitle_input(index_path, payload_path)['s:0']
            .filter('showinfo')
            .output('-', f='null')
        )

    def build_render(self, index_path: str, payload_path: str, metadata: Metadata, frame_dir: str):
        """Builds the black-canvas overlay graph that writes numbered PNGs."""
        width, height = metadata.width, metadata.height
        canvas = ffmpeg.input(f"color=black:size={width}x{height}:duration=1", f='lavfi')
        subtitles = self._subtitle_input(index_path, payload_path)['s:0'].filter('scale', width, height)
        return (
            ffmpeg
            .overlay(canvas, subtitles)
            .output(os.path.join(frame_dir, FRAME_PATTERN), fps_mode='vfr')
            .overwrite_output()
        )

    def _run(self, stream, stage: str) -> str:
        logger.debug(f"Running: {' '.join(stream.compile(cmd=self.ffmpeg_cmd))}")
        try:
            _, stderr = stream.run(cmd=self.ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffmpeg {stage} failed")
            logger.error(f"ffmpeg stderr: {stderr_output}")
            raise ExternalToolError(f"ffmpeg {stage} failed: {stderr_output}", stderr=stderr_output) from e
        except OSError as e:
            logger.error(f"Could not start ffmpeg ({self.ffmpeg_cmd}) for {stage}: {e}", exc_info=True)
            raise ExternalToolError(f"Could not start ffmpeg ({self.ffmpeg_cmd}): {e}") from e
        return stderr.decode('utf-8', errors='replace') if stderr else ""

    def probe(self, index_path: str, payload_path: str) -> str:
        logger.info(f"Probing subtitle timing for: {index_path}")
        return self._run(self.build_probe(index_path, payload_path), "timing probe")

    def render(self, index_path: str, payload_path: str, metadata: Metadata, frame_dir: str) -> None:
        logger.info(f"Rendering subtitle frames at {metadata.width}x{metadata.height} into {frame_dir}")
        stderr_output = self._run(self.build_render(index_path, payload_path, metadata, frame_dir), "frame rendering")
        if stderr_output and "muxing overhead" not in stderr_output:
            logger.debug(f"ffmpeg warnings: {stderr_output}")
