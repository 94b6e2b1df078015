"""
Text utilities for comparing spec labels.

Used by the alias index and the similarity scorer to put keys into a
single canonical form before lookup.
"""

import re
from typing import Optional

from config.smart_paste import ABBREVIATIONS

_DASHES = re.compile(r"[-–—]")
_BRACKETS = re.compile(r"[()\[\]{}]")
_DISALLOWED = re.compile(r"[^a-z0-9\s/%.]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: Optional[str]) -> str:
    """
    Normalize a label for comparison.

    Lowercases, turns dashes into spaces, drops brackets and anything
    outside [a-z0-9 /%.] (accented letters included), and collapses
    whitespace:
    - "Max. Aperture (f/)" → "max. aperture f/"
    - "Self-Noise" → "self noise"
    - "Décor" → "dcor"

    Idempotent: normalize(normalize(s)) == normalize(s).

    Args:
        text: Raw label (None is treated as empty)

    Returns:
        Normalized string, possibly empty
    """
    if not text:
        return ""

    cleaned = text.lower()
    cleaned = _DASHES.sub(" ", cleaned)
    cleaned = _BRACKETS.sub("", cleaned)
    cleaned = _DISALLOWED.sub("", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def expand_abbreviations(text: str) -> str:
    """Replace known abbreviations token by token ("max wt" → "maximum weight")."""
    return " ".join(ABBREVIATIONS.get(word, word) for word in text.split(" "))


_LEADING_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)")


def parse_number(text: str) -> Optional[float]:
    """
    Parse the leading decimal number of a string.

    - "1.5" → 1.5
    - "1.2.3" → 1.2
    - "." → None
    """
    match = _LEADING_NUMBER.match(text.strip()) if text else None
    return float(match.group(0)) if match else None


def format_fixed(value: float, decimals: int) -> str:
    """Fixed-point string; whole numbers round halves up ("2.5" → "3")."""
    if decimals == 0:
        return str(round_half_up(value))
    return f"{value:.{decimals}f}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
