"""
Pytest configuration and shared fixtures for VobSrt tests.

The renderer and recognizer are replaced by in-memory fakes so that no test
needs ffmpeg or tesseract installed.
"""

import logging
import os
from typing import Dict, List, Sequence, Tuple

import pytest

from vobsrt.models import Metadata, RasterFrame, RecognitionOptions, RecognitionResult
from vobsrt.renderer import SubtitleRenderer, FRAME_PATTERN
from vobsrt.recognizer import Recognizer

SAMPLE_IDX = """# VobSub index file, v7 (do not modify this line!)
#
# Settings
size: 720x480
org: 0, 0
scale: 100%, 100%
alpha: 100%
smooth: OFF
fadein/out: 50, 50
align: OFF at LEFT TOP
time offset: 0
forced subs: OFF
palette: 000000, 828282, 828282, 828282, 828282, 828282, 828282, ffffff, 828282, bababa, 828282, 828282, 828282, 828282, 828282, 828282
custom colors: OFF, tridx: 0000, colors: 000000, 000000, 000000, 000000

# Language index in use
langidx: 0

# English
id: en, index: 0
# Decomment next line to activate alternative name in DirectVobSub / Windows Media Player 6.x
# alt: English
# Vob/Cell ID: 1, 1 (PTS: 0)
timestamp: 00:00:01:000, filepos: 000000000
timestamp: 00:00:05:000, filepos: 000000800
"""

def probe_line(frame_no: int, seconds: float, checksum: str) -> str:
    """One line in the shape ffmpeg's showinfo filter prints."""
    pts = int(round(seconds * 90000))
    return (f"[Parsed_showinfo_0 @ 0x55d5c8a0c0] n:{frame_no:4d} pts:{pts:7d} pts_time:{seconds:<7g} "
            f"duration:      1 duration_time:1.1e-05 fmt:yuva420p cl:left sar:1/1 s:720x480 i:P iskey:1 type:I "
            f"checksum:{checksum} plane_checksum:[{checksum} 00000000 00000000 00000000]")

def make_probe_log(signals: Sequence[Tuple[float, str]]) -> str:
    lines = [
        "ffmpeg version 6.1 Copyright (c) 2000-2023 the FFmpeg developers",
        "Input #0, vobsub, from 'movie.idx':",
        "  Stream #0:0(en): Subtitle: dvd_subtitle (dvdsub), 720x480",
    ]
    lines.extend(probe_line(n, seconds, checksum) for n, (seconds, checksum) in enumerate(signals))
    lines.append("video:0kB audio:0kB subtitle:0kB other streams:0kB global headers:0kB muxing overhead: unknown")
    return "\n".join(lines) + "\n"

class FakeRenderer(SubtitleRenderer):
    """Returns a canned probe log and writes placeholder frame files."""

    def __init__(self, probe_log: str = "", frame_count: int = 0, render_error: Exception = None):
        self.probe_log = probe_log
        self.frame_count = frame_count
        self.render_error = render_error
        self.probe_calls: List[Tuple[str, str]] = []
        self.render_calls: List[Tuple[str, str, Metadata, str]] = []

    def probe(self, index_path, payload_path):
        self.probe_calls.append((index_path, payload_path))
        return self.probe_log

    def render(self, index_path, payload_path, metadata, frame_dir):
        self.render_calls.append((index_path, payload_path, metadata, frame_dir))
        if self.render_error is not None:
            raise self.render_error
        for n in range(1, self.frame_count + 1):
            with open(os.path.join(frame_dir, FRAME_PATTERN % n), 'wb') as f:
                f.write(b"\x89PNG\r\n\x1a\n")

class FakeRecognizer(Recognizer):
    """Answers with a fixed text per slot."""

    def __init__(self, texts: Sequence[str] = (), error: Exception = None):
        self.texts = list(texts)
        self.error = error
        self.calls: List[Tuple[List[RasterFrame], RecognitionOptions]] = []

    def recognize_batch(self, frames, options):
        self.calls.append((list(frames), options))
        if self.error is not None:
            raise self.error
        by_slot: Dict[int, str] = dict(enumerate(self.texts))
        return [RecognitionResult(slot=f.slot, text=by_slot.get(f.slot, ""), confidence=0.9) for f in frames]

@pytest.fixture
def sample_idx_text():
    return SAMPLE_IDX

@pytest.fixture
def idx_pair(tmp_path):
    """A movie.idx / movie.sub pair on disk."""
    idx_path = tmp_path / "movie.idx"
    idx_path.write_text(SAMPLE_IDX, encoding="utf-8")
    sub_path = tmp_path / "movie.sub"
    sub_path.write_bytes(b"\x00\x00\x01\xba" + b"\x00" * 60)
    return str(idx_path), str(sub_path)

@pytest.fixture
def base_config(tmp_path):
    work_parent = tmp_path / "work"
    return {
        'ffmpeg_path': None,
        'temp_dir': str(work_parent),
        'log_dir': None,
        'log_file': None,
        'max_line_length': 42,
        'min_text_length': 2,
        'default_duration_ms': 3000,
        'ocr': {'language': 'eng', 'min_confidence': 0.5, 'max_threads': 2, 'batch_size': 10, 'tesseract_cmd': None},
    }

@pytest.fixture(autouse=True)
def restore_root_logging():
    """setup_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
