"""Derives the subtitle timeline from the renderer's per-frame probe log."""

import logging
import re
from typing import Iterable, List, NamedTuple, Optional

from .models import TimelineEntry
from .renderer import SubtitleRenderer

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MS = 3000
BLANK_FRAME_CHECKSUM = "00000000"

# One showinfo report per line, e.g.
#   [Parsed_showinfo_0 @ 0x..] n:   3 pts: 900000 pts_time:10.0 ... checksum:8F3A12C4 plane_checksum:[...]
# Group 1: presentation time in seconds. Group 2: whole-frame checksum.
PROBE_LINE_PATTERN = re.compile(
    r'n:\s*\d+\s+.*?pts_time:\s*(\d+(?:\.\d*)?)\s+.*?checksum:([0-9A-Fa-f]{8})\b'
)

class ProbeSignal(NamedTuple):
    """A single parsed frame report."""
    time_ms: int
    checksum: str

    @property
    def is_blank(self) -> bool:
        return self.checksum == BLANK_FRAME_CHECKSUM

def parse_probe_line(line: str) -> Optional[ProbeSignal]:
    """Returns the signal carried by a probe log line, or None for any other line."""
    match = PROBE_LINE_PATTERN.search(line)
    if not match:
        return None
    time_ms = round(float(match.group(1)) * 1000)
    return ProbeSignal(time_ms=time_ms, checksum=match.group(2).upper())

def parse_probe_log(log_text: str) -> List[ProbeSignal]:
    signals = []
    for line in log_text.splitlines():
        signal = parse_probe_line(line)
        if signal is not None:
            signals.append(signal)
    return signals

def build_timeline(signals: Iterable[ProbeSignal], default_duration_ms: int = DEFAULT_DURATION_MS) -> List[TimelineEntry]:
    """
    Turns probe signals into timeline entries.

    A non-blank frame opens a new entry lasting default_duration_ms. Every
    blank frame moves the end of the most recently opened entry to the blank
    frame's timestamp, so a later blank extends an entry an earlier blank
    already closed. An entry that never sees a blank frame keeps the default
    duration. A blank at or before the entry's start is ignored.

    Two starts in a row are not merged: each opens its own entry and the
    earlier one keeps its provisional end.

    Args:
        signals: Parsed probe signals in log order.
        default_duration_ms: Provisional duration for a freshly opened entry.

    Returns:
        Entries in the order they were opened, indexed from 0.
    """
    timeline: List[TimelineEntry] = []
    for signal in signals:
        if not signal.is_blank:
            timeline.append(TimelineEntry(
                index=len(timeline),
                start_time=signal.time_ms,
                end_time=signal.time_ms + default_duration_ms,
            ))
        elif timeline:
            last = timeline[-1]
            if signal.time_ms > last.start_time:
                last.end_time = signal.time_ms
            else:
                logger.debug(f"Blank frame at {signal.time_ms}ms does not follow entry {last.index}; keeping its end")
    return timeline


class TimelineBuilder:
    """Runs the timing probe and converts its log into a timeline."""

    def __init__(self, renderer: SubtitleRenderer, default_duration_ms: int = DEFAULT_DURATION_MS):
        self.renderer = renderer
        self.default_duration_ms = default_duration_ms

    def build(self, index_path: str, payload_path: str) -> List[TimelineEntry]:
        """
        Raises:
            ExternalToolError: If the probe invocation fails.
        """
        probe_log = self.renderer.probe(index_path, payload_path)
        signals = parse_probe_log(probe_log)
        timeline = build_timeline(signals, self.default_duration_ms)
        logger.info(f"Timing probe reported {len(signals)} frames; built {len(timeline)} timeline entries")
        return timeline
