"""Cleans raw recognized text and re-flows it into subtitle lines."""

import re
import unicodedata
from typing import List, Optional

DEFAULT_MAX_LINE_LENGTH = 42
DEFAULT_MIN_TEXT_LENGTH = 2
MAX_LINES = 2

# Common misrecognitions in rendered DVD subtitle glyphs.
OCR_REPLACEMENTS = {
    "/": "I",
    "\\": "I",
    "|": "I",
    "~": "-",
    "°": "o",
    "¢": "c",
    "£": "E",
    "¥": "Y",
    "§": "S",
    "©": "O",
    "®": "R",
    "±": "+",
    "²": "2",
    "³": "3",
    "¹": "1",
    "¼": "1/4",
    "½": "1/2",
    "¾": "3/4",
    "À": "A", "Á": "A", "Â": "A", "Ã": "A", "Ä": "A", "Å": "A",
    "È": "E", "É": "E", "Ê": "E", "Ë": "E",
    "Ì": "I", "Í": "I", "Î": "I", "Ï": "I",
    "Ò": "O", "Ó": "O", "Ô": "O", "Õ": "O", "Ö": "O",
    "Ù": "U", "Ú": "U", "Û": "U", "Ü": "U",
}
# Single pass: the output of one substitution is never fed to another.
_REPLACEMENT_TABLE = str.maketrans(OCR_REPLACEMENTS)

_DISALLOWED_CHARS = re.compile(r'[^\w\s.,!?;:()\-"\']')
_WHITESPACE_RUN = re.compile(r'\s+')

def _fold_accent(char: str) -> str:
    if char.isascii() or not char.isalpha():
        return char
    base = "".join(c for c in unicodedata.normalize("NFKD", char) if not unicodedata.combining(c))
    if base and base.isascii() and base.isalpha():
        return base
    return char

def clean_ocr_text(text: Optional[str]) -> Optional[str]:
    """
    Fixes common OCR mistakes and strips characters subtitles never need.

    Steps: apply OCR_REPLACEMENTS, fold remaining accented Latin letters to
    their ASCII base, drop anything outside word characters, whitespace and
    . , ! ? ; : ( ) - " ', collapse whitespace runs and trim.

    Word characters are Unicode-aware, so Cyrillic, Greek, CJK and other
    non-Latin letters survive the strip step. Only accented Latin letters
    are folded to ASCII.

    None or an empty string is returned unchanged.
    """
    if not text:
        return text
    cleaned = text.translate(_REPLACEMENT_TABLE)
    cleaned = "".join(_fold_accent(c) for c in cleaned)
    cleaned = _DISALLOWED_CHARS.sub("", cleaned)
    cleaned = _WHITESPACE_RUN.sub(" ", cleaned)
    return cleaned.strip()

def _pack_words(words: List[str], max_length: int) -> List[str]:
    lines: List[str] = []
    current = ""
    for word in words:
        if current and len(current) + 1 + len(word) <= max_length:
            current += " " + word
            continue
        if current:
            lines.append(current)
            current = ""
        # Hard-break words that cannot fit on a line of their own.
        cut = max(max_length - 1, 1)
        while len(word) > max_length:
            lines.append(word[:cut] + "-")
            word = word[cut:]
        current = word
    if current:
        lines.append(current)
    return lines

def wrap_subtitle_text(text: Optional[str], max_length: int = DEFAULT_MAX_LINE_LENGTH) -> Optional[str]:
    """
    Wraps text into at most two lines of max_length characters.

    Words are packed greedily. A word longer than a line is split with a
    trailing hyphen. When packing needs more than two lines, line two is the
    first line of re-wrapping whatever follows line one and the rest is
    dropped.
    """
    if not text:
        return text
    if max_length < 1:
        raise ValueError("max_length must be at least 1")
    if len(text) <= max_length and "\n" not in text:
        return text

    lines = _pack_words(text.split(), max_length)
    return "\n".join(lines[:MAX_LINES])

def normalize_text(raw_text: Optional[str],
                   max_length: int = DEFAULT_MAX_LINE_LENGTH,
                   min_length: int = DEFAULT_MIN_TEXT_LENGTH) -> str:
    """
    Cleans then wraps one recognition result.

    Returns an empty string when the cleaned text is shorter than min_length,
    which marks the slot as having no subtitle.
    """
    cleaned = (clean_ocr_text(raw_text or "") or "").strip()
    if len(cleaned) < min_length:
        return ""
    return wrap_subtitle_text(cleaned, max_length)
