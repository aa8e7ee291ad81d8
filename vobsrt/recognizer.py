"""Handles image-to-text recognition of rendered subtitle frames using Tesseract."""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple

import pytesseract
from pytesseract import Output
from PIL import Image, ImageOps

from .models import RasterFrame, RecognitionOptions, RecognitionResult
from .exceptions import RecognitionError

logger = logging.getLogger(__name__)

RECOGNITION_LEVELS = ("fast", "accurate")

class Recognizer(ABC):
    """Abstract base class for batch recognizers."""

    @abstractmethod
    def recognize_batch(self, frames: Sequence[RasterFrame], options: RecognitionOptions) -> List[RecognitionResult]:
        """
        Recognizes text in every frame.

        Args:
            frames: Frames to recognize, in slot order.
            options: Recognition level, confidence floor and batching limits.

        Returns:
            Exactly one RecognitionResult per frame, in the same order. Empty
            text is a valid result.

        Raises:
            RecognitionError: If the call fails. No partial results are returned.
        """
        pass

class TesseractRecognizer(Recognizer):
    """Implements recognition with Tesseract through pytesseract."""

    def __init__(self, tesseract_cmd: Optional[str] = None):
        """
        Initializes the TesseractRecognizer.

        Args:
            tesseract_cmd: Optional path to the tesseract executable.
                           If None, assumes tesseract is in the system PATH.
        """
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        logger.info(f"Using tesseract command: {pytesseract.pytesseract.tesseract_cmd}")

    def _build_config(self, level: str) -> str:
        # LSTM engine, one uniform block of text.
        config = "--oem 1 --psm 6 -c preserve_interword_spaces=1"
        if level == "accurate":
            config += " -c textord_heavy_nr=1"
        return config

    def prepare_image(self, image: Image.Image, level: str) -> Image.Image:
        """
        Converts a rendered frame into dark text on a light background.

        'accurate' also upscales 2x and stretches contrast, which is slower
        but helps with small DVD subtitle glyphs.
        """
        prepared = ImageOps.invert(image.convert('L'))
        if level == "accurate":
            prepared = prepared.resize((prepared.width * 2, prepared.height * 2), Image.Resampling.LANCZOS)
            prepared = ImageOps.autocontrast(prepared)
        return prepared

    def result_from_data(self, slot: int, data: dict, min_confidence: float) -> RecognitionResult:
        """Rebuilds text lines from image_to_data output, dropping low-confidence words."""
        lines: Dict[Tuple[int, int, int], List[str]] = {}
        confidences: List[float] = []
        for i, raw_text in enumerate(data.get("text", [])):
            word = (raw_text or "").strip()
            if not word:
                continue
            confidence = float(data["conf"][i]) / 100.0
            if confidence < 0 or confidence < min_confidence:
                continue
            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines.setdefault(key, []).append(word)
            confidences.append(confidence)

        text = "\n".join(" ".join(words) for _, words in sorted(lines.items()))
        mean_confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return RecognitionResult(slot=slot, text=text, confidence=mean_confidence)

    def _recognize_frame(self, frame: RasterFrame, options: RecognitionOptions) -> RecognitionResult:
        with Image.open(frame.path) as image:
            prepared = self.prepare_image(image, options.level)
        data = pytesseract.image_to_data(
            prepared,
            lang=options.language,
            config=self._build_config(options.level),
            output_type=Output.DICT
        )
        return self.result_from_data(frame.slot, data, options.min_confidence)

    def recognize_batch(self, frames: Sequence[RasterFrame], options: RecognitionOptions) -> List[RecognitionResult]:
        if options.level not in RECOGNITION_LEVELS:
            raise RecognitionError(f"Invalid recognition level '{options.level}'. Choose one of {RECOGNITION_LEVELS}.")

        total = len(frames)
        logger.info(f"Recognizing {total} frames ({options.level} quality, {options.max_threads} threads, batches of {options.batch_size})")
        results: List[RecognitionResult] = []
        try:
            with ThreadPoolExecutor(max_workers=options.max_threads) as executor:
                for start in range(0, total, options.batch_size):
                    chunk = frames[start:start + options.batch_size]
                    results.extend(executor.map(lambda f: self._recognize_frame(f, options), chunk))
                    logger.info(f"Recognized frame {start + len(chunk)}/{total}")
        except pytesseract.TesseractNotFoundError as e:
            logger.error(f"Tesseract is not installed or not on PATH: {e}")
            raise RecognitionError(f"Tesseract not found: {e}") from e
        except Exception as e:
            logger.error(f"Batch recognition failed: {e}", exc_info=True)
            raise RecognitionError(f"Failed to recognize subtitle frames: {e}") from e

        if len(results) != total:
            raise RecognitionError(f"Recognizer returned {len(results)} results for {total} frames")
        return results
