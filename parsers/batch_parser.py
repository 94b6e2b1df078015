"""
Batch paste segmentation.

Splits one pasted blob that describes several products into per-product
segments. Boundaries are horizontal rules, markdown headings, "Product
Name:" style labels, or a brand-name line right after a blank line.
"""

import re

import structlog

from config.smart_paste import KNOWN_BRANDS
from models.smart_paste import Segment

logger = structlog.get_logger(__name__)

HORIZONTAL_RULE = re.compile(r"^[-=_]{3,}\s*$")
HEADING = re.compile(r"^#{1,3}\s+(.+)")
PRODUCT_LABEL = re.compile(r"^(?:product|item|model)\s*(?:name|#|number)?\s*[:→=]\s*(.+)", re.IGNORECASE)
_LABEL_VALUE = re.compile(r"[:→=]\s*(.+)")

# Whole-word match against the full brand list
BRAND_LINE = re.compile(
    r"\b(?:" + "|".join(re.escape(brand) for brand in KNOWN_BRANDS) + r")\b",
    re.IGNORECASE,
)

# A new segment needs at least this many lines after the previous start
MIN_SEGMENT_LINES = 3
MIN_SEGMENT_CHARS = 20


def _boundary_name(lines: list[str], i: int) -> tuple[bool, str | None]:
    """Return (is_boundary, captured name) for line i."""
    line = lines[i].strip()

    if HORIZONTAL_RULE.match(line):
        return True, None

    heading = HEADING.match(line)
    if heading:
        return True, re.sub(r"^#{1,3}\s+", "", line).strip()

    if PRODUCT_LABEL.match(line):
        value = _LABEL_VALUE.search(line)
        return True, value.group(1).strip() if value else None

    if i > 0 and not lines[i - 1].strip() and BRAND_LINE.search(line) and len(line) < 120:
        return True, line

    return False, None


def detect_product_boundaries(text: str) -> list[Segment]:
    """
    Detect product boundaries in a multi-product paste.

    A boundary closes the running segment only when at least three lines
    have passed since that segment started; otherwise it can still name the
    running segment. Segments with 20 or fewer characters are dropped.

    Args:
        text: Raw pasted text

    Returns:
        Segments in order, or [] when fewer than two were found (single product)
    """
    if not text:
        return []

    lines = text.split("\n")
    segments: list[Segment] = []
    current_start = 0
    current_name: str | None = None

    for i, raw_line in enumerate(lines):
        if not raw_line.strip():
            continue

        is_boundary, detected_name = _boundary_name(lines, i)
        if not is_boundary:
            continue

        if i >= current_start + MIN_SEGMENT_LINES:
            segment_text = "\n".join(lines[current_start:i]).strip()
            if len(segment_text) > MIN_SEGMENT_CHARS:
                segments.append(Segment(
                    start_line=current_start,
                    end_line=i - 1,
                    name=current_name or f"Product {len(segments) + 1}",
                    text=segment_text,
                ))
            current_start = i
            current_name = detected_name
        elif not current_name:
            current_name = detected_name

    last_text = "\n".join(lines[current_start:]).strip()
    if len(last_text) > MIN_SEGMENT_CHARS:
        segments.append(Segment(
            start_line=current_start,
            end_line=len(lines) - 1,
            name=current_name or f"Product {len(segments) + 1}",
            text=last_text,
        ))

    if len(segments) < 2:
        return []

    logger.debug("product_boundaries_detected", segments=len(segments))
    return segments
