"""Handles merging timeline and recognized text into subtitle files (SRT)."""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Sequence

from .models import TimelineEntry, RecognitionResult, SrtEntry
from .exceptions import FormattingError
from .text_normalizer import normalize_text, DEFAULT_MAX_LINE_LENGTH, DEFAULT_MIN_TEXT_LENGTH
from .utils import format_time_srt

logger = logging.getLogger(__name__)

class SubtitleFormatter(ABC):
    """Abstract base class for subtitle formatters."""

    def __init__(self,
                 max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
                 min_text_length: int = DEFAULT_MIN_TEXT_LENGTH):
        self.max_line_length = max_line_length
        self.min_text_length = min_text_length

    def assemble(self, timeline: Sequence[TimelineEntry], results: Iterable[RecognitionResult]) -> List[SrtEntry]:
        """
        Pairs each timeline entry with the recognized text of the same slot.

        Slots whose normalized text is empty are dropped and the survivors
        are numbered from 1. A survivor that would still be on screen when
        the next one starts is cut at the next start.

        Args:
            timeline: Timeline entries in slot order.
            results: Recognition results, one per rendered frame.

        Returns:
            Display-ready SRT entries.
        """
        results_by_slot = {}
        for result in results:
            if result.slot in results_by_slot:
                logger.warning(f"Duplicate recognition result for slot {result.slot}; keeping the first")
                continue
            results_by_slot[result.slot] = result

        timeline_slots = {entry.index for entry in timeline}
        orphaned = sorted(set(results_by_slot) - timeline_slots)
        if orphaned:
            logger.warning(f"{len(orphaned)} recognized frames have no timeline entry (slots {orphaned[:10]})")

        kept: List[TimelineEntry] = []
        texts: List[str] = []
        for entry in timeline:
            result = results_by_slot.get(entry.index)
            if result is None:
                logger.warning(f"No frame was rendered for timeline slot {entry.index}; skipping")
                continue
            text = normalize_text(result.text, self.max_line_length, self.min_text_length)
            if not text:
                logger.debug(f"  No text detected in frame {entry.index}")
                continue
            logger.debug(f"  Frame {entry.index}: \"{text.replace(chr(10), ' | ')}\"")
            kept.append(entry)
            texts.append(text)

        srt_entries = []
        for position, (entry, text) in enumerate(zip(kept, texts)):
            end_time = entry.end_time
            if position + 1 < len(kept):
                next_start = kept[position + 1].start_time
                if entry.start_time < next_start < end_time:
                    logger.debug(f"Trimming slot {entry.index} from {entry.duration}ms to "
                                 f"{next_start - entry.start_time}ms so it ends at next start {next_start}ms")
                    end_time = next_start
            srt_entries.append(SrtEntry(
                index=position + 1,
                start_time=entry.start_time,
                end_time=end_time,
                text=text
            ))
        return srt_entries

    @abstractmethod
    def serialize(self, entries: Sequence[SrtEntry]) -> str:
        """Renders entries as the full text of a subtitle document."""
        pass

    def write(self, entries: Sequence[SrtEntry], output_path: str) -> None:
        """
        Writes the serialized document in a single write.

        Raises:
            FormattingError: If file writing fails.
        """
        content = self.serialize(entries)
        try:
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(content)
            logger.info(f"Successfully wrote {len(entries)} subtitle blocks to {output_path}")
        except IOError as e:
            logger.error(f"Failed to write subtitle file to {output_path}: {e}", exc_info=True)
            raise FormattingError(f"Could not write subtitle file: {e}") from e


class SRTFormatter(SubtitleFormatter):
    """Formats subtitles into the SRT (SubRip Text) format."""

    def format_entry(self, entry: SrtEntry) -> str:
        return "\n".join([
            str(entry.index),
            f"{format_time_srt(entry.start_time)} --> {format_time_srt(entry.end_time)}",
            entry.text,
            "",
        ])

    def serialize(self, entries: Sequence[SrtEntry]) -> str:
        return "\n".join(self.format_entry(entry) for entry in entries)
