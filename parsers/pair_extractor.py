"""
Key/value pair extraction from cleaned product text.

Reads one line at a time and recognizes:
- Delimited pairs: "Key\\tValue", "Key: Value", "Key | Value", "Key = Value",
  "Key → Value", "Key - Value"
- Label on one line with the value on the next ("Weight" / "1.2 kg")
- A product-name line (brand or product noun, first hit wins)

Also hosts the single-purpose detectors that run over the extracted pairs:
price, brand, category and serial/model number.
"""

import re
from typing import Optional

import structlog

from config.smart_paste import (
    KNOWN_BRANDS,
    CATEGORY_KEYWORDS,
    PRODUCT_NOUN_PATTERN,
    PRICE_LABEL_PATTERN,
    PRICE_KEY_PRIORITY,
    CURRENCY_NAMES,
)
from models.smart_paste import RawPair

logger = structlog.get_logger(__name__)

# Tried in order, first usable match wins
SPEC_PATTERNS = [
    re.compile(r"^([^\t]{2,60})\t+(.+)$"),       # Key\tValue (table-derived)
    re.compile(r"^([^:]{2,60}):\s+(.+)$"),       # Key: Value
    re.compile(r"^([^|]{2,60})\s*\|\s*(.+)$"),   # Key | Value
    re.compile(r"^([^=]{2,60})\s*=\s*(.+)$"),    # Key = Value
    re.compile(r"^([^→]{2,40})\s*→\s*(.{2,})$"), # Key → Value
    re.compile(r"^([^-]{2,40})\s+[-–—]\s+(.{2,})$"),  # Key - Value
]

NOISE_PATTERNS = [
    re.compile(
        r"^(home|shop|cart|login|sign in|sign up|sign out|menu|search|filter by|sort by|"
        r"subscribe|newsletter|cookie|accept|privacy|terms|copyright|©|all rights)",
        re.IGNORECASE,
    ),
    re.compile(
        r"^(add to|buy now|add to cart|in stock|out of stock|free shipping|see more|"
        r"learn more|read more|show more|view all|close|back to|next|prev)",
        re.IGNORECASE,
    ),
    re.compile(
        r"^(share|tweet|pin it|email this|print|save for|wishlist|compare|reviews?\s*\(|"
        r"rating|stars?|\d+ customer)",
        re.IGNORECASE,
    ),
    re.compile(r"^\d+(\.\d+)?$"),
    re.compile(r"^[A-Z0-9]{3,}$"),  # part numbers, SKUs (case-sensitive)
    re.compile(r"^\[.*\]$"),
]

NAME_LABEL_PATTERN = re.compile(r"^(product\s*name|item\s*name|model\s*name|name|title)$", re.IGNORECASE)

# Two-line heuristic
_LABEL_DELIMITERS = re.compile(r"[:|\t=→]")
_VALUE_UNIT_TOKENS = re.compile(
    r"\b(mm|cm|m|kg|g|lbs|oz|W|V|Wh|mAh|Hz|kHz|dB|lux|lm|cd|°|fps|bit|yes|no|true|false|approx)\b",
    re.IGNORECASE,
)
_VALUE_CODE_PREFIX = re.compile(r"^(f/|[A-Z]{2,4}[\s-])", re.IGNORECASE)

SERIAL_KEY_PATTERN = re.compile(r"^(serial\s*(number|no|#)?|s/n|sn)$", re.IGNORECASE)
MODEL_KEY_PATTERN = re.compile(
    r"^(model\s*(number|no|#)?|part\s*(number|no|#)?|sku|upc|ean|asin|"
    r"mfr\s*(part|#|number)?|manufacturer\s*part|item\s*(number|no|#)?)$",
    re.IGNORECASE,
)

_PAIR_PRICE = re.compile(r"[$€£¥]?\s*([\d,]+\.?\d*)")
_PRICE_RANGE = re.compile(r"[$€£¥]\s*([\d,]+\.?\d*)\s*[-–—]\s*[$€£¥]?\s*([\d,]+\.?\d*)")
_SINGLE_PRICE = re.compile(r"[$€£¥]\s*([\d,]+\.?\d*)")
_CURRENCY_SYMBOL = re.compile(r"([$€£¥])")


def is_noise(line: str) -> bool:
    """True for navigation, legal, commerce boilerplate and bare tokens."""
    return any(pattern.search(line) for pattern in NOISE_PATTERNS)


def _match_delimited(line: str) -> Optional[tuple[str, str]]:
    for pattern in SPEC_PATTERNS:
        match = pattern.match(line)
        if not match:
            continue
        key = match.group(1).strip()
        value = match.group(2).strip()
        if value.startswith("http") or len(value) > 200 or len(value) < 1:
            continue
        if len(key) < 2:
            continue
        return key, value
    return None


def _looks_like_label(line: str) -> bool:
    return (
        3 <= len(line) <= 50
        and not line[0].isdigit()
        and not _LABEL_DELIMITERS.search(line)
        and bool(re.match(r"[A-Za-z]", line))
    )


def _looks_like_value(line: str) -> bool:
    if not line or len(line) > 150:
        return False
    return bool(
        re.match(r"\d", line)
        or _VALUE_UNIT_TOKENS.search(line)
        or _VALUE_CODE_PREFIX.match(line)
    )


def _looks_like_product_name(line: str) -> bool:
    if not 5 < len(line) < 120:
        return False
    lower = line.lower()
    if any(brand.lower() in lower for brand in KNOWN_BRANDS):
        return True
    return bool(PRODUCT_NOUN_PATTERN.search(line))


def extract_raw_pairs(lines: list[str]) -> tuple[list[RawPair], str]:
    """
    Extract raw key/value pairs and the product name from cleaned lines.

    Args:
        lines: Trimmed, non-empty lines of cleaned text

    Returns:
        Tuple of (pairs in line order, detected product name or "")
    """
    pairs: list[RawPair] = []
    detected_name = ""

    i = 0
    while i < len(lines):
        line = lines[i]
        step = 1

        if 3 <= len(line) <= 300 and not is_noise(line):
            matched = False

            delimited = _match_delimited(line)
            if delimited:
                key, value = delimited
                pairs.append(RawPair(key=key, value=value, source_line=line, line_index=i))
                matched = True
                if not detected_name and NAME_LABEL_PATTERN.match(key):
                    detected_name = value

            if not matched and i + 1 < len(lines):
                next_line = lines[i + 1].strip()
                if _looks_like_label(line) and _looks_like_value(next_line):
                    pairs.append(RawPair(
                        key=line,
                        value=next_line,
                        source_line=f"{line} → {next_line}",
                        line_index=i,
                    ))
                    matched = True
                    step = 2

            if not matched and not detected_name and _looks_like_product_name(line):
                detected_name = line

        i += step

    logger.debug("raw_pairs_extracted", lines=len(lines), pairs=len(pairs), name_found=bool(detected_name))
    return pairs, detected_name


def _price_key_rank(key: str) -> int:
    for rank, label in enumerate(PRICE_KEY_PRIORITY):
        if label in key:
            return rank
    return len(PRICE_KEY_PRIORITY)


def extract_price(pairs: list[RawPair], full_text: str) -> tuple[str, str]:
    """
    Find the purchase price.

    Price-labeled pairs win, ranked by label ("sale price" beats "msrp").
    Otherwise the raw text is scanned for a currency range (lower bound is
    used) or a single currency-prefixed amount.

    Args:
        pairs: Extracted pairs
        full_text: Original, uncleaned input text

    Returns:
        Tuple of (price without thousands separators, note). ("", "") if none.
    """
    best_rank = len(PRICE_KEY_PRIORITY) + 1
    price_from_pair = ""

    for pair in pairs:
        key = pair.key.strip().lower()
        if not PRICE_LABEL_PATTERN.match(key):
            continue
        rank = _price_key_rank(key)
        if rank < best_rank:
            match = _PAIR_PRICE.search(pair.value)
            if match:
                price_from_pair = match.group(1).replace(",", "")
                best_rank = rank

    if price_from_pair:
        return price_from_pair, ""

    range_match = _PRICE_RANGE.search(full_text)
    if range_match:
        return range_match.group(1).replace(",", ""), f"Range: {range_match.group(0)}"

    single_match = _SINGLE_PRICE.search(full_text)
    if single_match:
        note = ""
        symbol = _CURRENCY_SYMBOL.search(full_text).group(1)
        if symbol != "$":
            note = f"Currency: {CURRENCY_NAMES.get(symbol, symbol)}"
        return single_match.group(1).replace(",", ""), note

    return "", ""


def detect_brand(name: str, text_lower: str) -> str:
    """First known brand in the product name, else in the whole text."""
    name_lower = name.lower() if name else ""
    if name_lower:
        for brand in KNOWN_BRANDS:
            if brand.lower() in name_lower:
                return brand
    for brand in KNOWN_BRANDS:
        if brand.lower() in text_lower:
            return brand
    return ""


def detect_category(text_lower: str) -> str:
    """Category with the most keyword hits; declaration order breaks ties."""
    best_category = ""
    best_score = 0
    for category, keywords in CATEGORY_KEYWORDS.items():
        score = sum(1 for keyword in keywords if keyword in text_lower)
        if score > best_score:
            best_category = category
            best_score = score
    return best_category


def extract_serial_model(pairs: list[RawPair]) -> tuple[str, str]:
    """Return (serial_number, model_number) from the first matching keys."""
    serial_number = ""
    model_number = ""
    for pair in pairs:
        key = pair.key.strip()
        if not serial_number and SERIAL_KEY_PATTERN.match(key):
            serial_number = pair.value.strip()
        if not model_number and MODEL_KEY_PATTERN.match(key):
            model_number = pair.value.strip()
    return serial_number, model_number
