"""Orchestrates the VobSub to SRT conversion pipeline."""

import dataclasses
import logging
import os
import time
from typing import Optional

from .idx_parser import IdxParser
from .timeline import TimelineBuilder
from .frame_extractor import FrameExtractor
from .recognizer import Recognizer
from .renderer import SubtitleRenderer
from .subtitle_formatter import SubtitleFormatter, SRTFormatter
from .models import RunContext, RecognitionOptions, ConversionSummary
from .exceptions import VobSrtError, InputAccessError, EmptyResultError
from .utils import companion_payload_path, ensure_dir_exists, working_directory

logger = logging.getLogger(__name__)

class VobSubConverter:
    """
    Manages the end-to-end conversion of one IDX/SUB pair into an SRT file.
    """

    def __init__(
        self,
        config: dict,
        renderer: SubtitleRenderer,
        recognizer: Recognizer,
        formatter: Optional[SubtitleFormatter] = None
    ):
        """
        Initializes the VobSubConverter.

        Args:
            config: A dictionary containing configuration settings.
            renderer: The external renderer used for probing and rasterizing.
            recognizer: The batch recognizer used on rendered frames.
            formatter: Output formatter. Defaults to SRT built from config.
        """
        self.config = config
        self.temp_dir = config.get('temp_dir')
        self.idx_parser = IdxParser()
        self.timeline_builder = TimelineBuilder(renderer, config.get('default_duration_ms', 3000))
        self.frame_extractor = FrameExtractor(renderer)
        self.recognizer = recognizer
        self.formatter = formatter or SRTFormatter(
            max_line_length=config.get('max_line_length', 42),
            min_text_length=config.get('min_text_length', 2)
        )

    def recognition_options(self, quality: str) -> RecognitionOptions:
        ocr = self.config.get('ocr') or {}
        return RecognitionOptions(
            level=quality,
            min_confidence=ocr.get('min_confidence', 0.5),
            max_threads=ocr.get('max_threads', 4),
            batch_size=ocr.get('batch_size', 100),
            language=ocr.get('language', 'eng')
        )

    def _check_inputs(self, index_path: str, payload_path: str) -> None:
        for label, path in (("IDX", index_path), ("SUB", payload_path)):
            if not os.path.isfile(path):
                raise InputAccessError(f"Cannot access {label} file: {path}")
            if not os.access(path, os.R_OK):
                raise InputAccessError(f"{label} file is not readable: {path}")

    def parse_metadata(self, context: RunContext) -> RunContext:
        metadata = self.idx_parser.parse_file(context.index_path)
        return dataclasses.replace(context, metadata=metadata)

    def build_timeline(self, context: RunContext) -> RunContext:
        timeline = self.timeline_builder.build(context.index_path, context.payload_path)
        if not timeline:
            raise EmptyResultError("No subtitle timing entries found in subtitle stream")
        declared = context.metadata.declared_entries
        if declared and declared != len(timeline):
            logger.warning(f"IDX declares {declared} timestamps but the timing probe found {len(timeline)} entries")
        return dataclasses.replace(context, timeline=tuple(timeline))

    def render_frames(self, context: RunContext) -> RunContext:
        frames = self.frame_extractor.extract(
            context.index_path, context.payload_path, context.metadata, context.work_dir
        )
        if not frames:
            raise EmptyResultError("No subtitle images could be created")
        if len(frames) != len(context.timeline):
            logger.warning(f"Rendered {len(frames)} frames for {len(context.timeline)} timeline entries; "
                           f"unmatched slots will be skipped")
        return dataclasses.replace(context, frames=tuple(frames))

    def recognize(self, context: RunContext, options: RecognitionOptions) -> RunContext:
        results = self.recognizer.recognize_batch(list(context.frames), options)
        frame_slots = [frame.slot for frame in context.frames]
        result_slots = [result.slot for result in results]
        if sorted(frame_slots) != sorted(result_slots):
            raise VobSrtError("Recognizer results do not match rendered frames slot for slot")
        return dataclasses.replace(context, results=tuple(results))

    def convert(self, index_path: str, output_path: str, quality: str = "fast",
                payload_path: Optional[str] = None) -> ConversionSummary:
        """
        Executes the full conversion pipeline for a single IDX/SUB pair.

        Args:
            index_path: Path to the .idx file.
            output_path: Path of the .srt file to write.
            quality: Recognition level, 'fast' or 'accurate'.
            payload_path: Path to the .sub file. Defaults to the .idx path with a .sub extension.

        Returns:
            A ConversionSummary describing what was produced.

        Raises:
            InputAccessError: If the index or payload file is missing or unreadable.
            ExternalToolError: If ffmpeg fails.
            RecognitionError: If the recognizer fails.
            EmptyResultError: If a stage yields nothing usable.
            VobSrtError: For any other failure in the pipeline.
        """
        start_time = time.time()
        payload_path = payload_path or companion_payload_path(index_path)
        logger.info(f"--- Starting conversion for: {index_path} ---")
        logger.debug(f"SUB file: {payload_path}")

        try:
            self._check_inputs(index_path, payload_path)
            output_dir = os.path.dirname(os.path.abspath(output_path))
            ensure_dir_exists(output_dir)
            options = self.recognition_options(quality)

            with working_directory(self.temp_dir) as work_dir:
                context = RunContext(index_path=index_path, payload_path=payload_path, work_dir=work_dir)

                logger.info("Step 1: Parsing IDX metadata...")
                context = self.parse_metadata(context)

                logger.info("Step 2: Probing subtitle timeline...")
                context = self.build_timeline(context)

                logger.info("Step 3: Rendering subtitle frames...")
                context = self.render_frames(context)

                logger.info(f"Step 4: Recognizing text ({quality} quality)...")
                context = self.recognize(context, options)

                logger.info("Step 5: Assembling subtitles...")
                entries = self.formatter.assemble(context.timeline, context.results)
                if not entries:
                    raise EmptyResultError("No text could be extracted from subtitles")
                self.formatter.write(entries, output_path)

            end_time = time.time()
            logger.info(f"--- Conversion completed successfully in {end_time - start_time:.2f} seconds ---")
            return ConversionSummary(
                output_path=output_path,
                timeline_entries=len(context.timeline),
                frames=len(context.frames),
                entries=tuple(entries)
            )

        except VobSrtError as e:
            # Known failures are logged without a stack trace
            logger.error(f"Conversion failed: {e}", exc_info=False)
            raise
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred during conversion: {e}", exc_info=True)
            raise VobSrtError(f"An unexpected critical error occurred: {e}") from e
