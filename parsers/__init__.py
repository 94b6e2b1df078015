"""
Text parsers for smart paste.

Cleaning, pair extraction and batch segmentation. Pure functions over
strings; no I/O.
"""

from parsers.text_cleaner import clean_input_text, split_lines
from parsers.pair_extractor import (
    extract_raw_pairs,
    extract_price,
    detect_brand,
    detect_category,
    extract_serial_model,
)
from parsers.batch_parser import detect_product_boundaries

__all__ = [
    "clean_input_text",
    "split_lines",
    "extract_raw_pairs",
    "extract_price",
    "detect_brand",
    "detect_category",
    "extract_serial_model",
    "detect_product_boundaries",
]
