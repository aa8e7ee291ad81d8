"""Data models for VobSrt."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

DEFAULT_WIDTH = 720
DEFAULT_HEIGHT = 480

@dataclass(frozen=True)
class Metadata:
    """Values parsed from the IDX file. Only width/height drive rendering."""
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    language: Optional[str] = None
    track_index: Optional[int] = None
    palette: Tuple[int, ...] = ()
    declared_entries: int = 0

@dataclass
class TimelineEntry:
    """One on-screen interval measured by the timing probe (milliseconds)."""
    index: int
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

@dataclass(frozen=True)
class RasterFrame:
    """A rendered subtitle image for one timeline slot."""
    slot: int
    path: str

@dataclass(frozen=True)
class RecognitionResult:
    """Raw recognizer output for one frame."""
    slot: int
    text: str
    confidence: float = 0.0

@dataclass(frozen=True)
class RecognitionOptions:
    """Options passed to the batch recognizer."""
    level: str = "fast" # 'fast' or 'accurate'
    min_confidence: float = 0.5
    max_threads: int = 4
    batch_size: int = 100
    language: str = "eng"

@dataclass(frozen=True)
class SrtEntry:
    """A numbered, display-ready subtitle block."""
    index: int
    start_time: int
    end_time: int
    text: str

@dataclass(frozen=True)
class RunContext:
    """
    Pipeline state threaded between stages.

    Each stage takes a context and returns a new one (see dataclasses.replace),
    so no stage mutates what an earlier one produced.
    """
    index_path: str
    payload_path: str
    work_dir: str
    metadata: Metadata = field(default_factory=Metadata)
    timeline: Tuple[TimelineEntry, ...] = ()
    frames: Tuple[RasterFrame, ...] = ()
    results: Tuple[RecognitionResult, ...] = ()

@dataclass(frozen=True)
class ConversionSummary:
    """What a finished conversion produced."""
    output_path: str
    timeline_entries: int
    frames: int
    entries: Tuple[SrtEntry, ...] = ()
