"""
Unit normalization and field-type coercion.

Pure value rewrites applied when building the apply payload:
- normalize_units: imperial <-> metric (compound weights, dimension
  pairs/triples, single values, °F -> °C)
- coerce_field_value: yes/no booleans, color-temperature ranges and bare
  aperture numbers

Both return None when nothing applies.
"""

import re
from typing import Optional

from config.smart_paste import (
    UNIT_CONVERSIONS,
    METRIC_CONVERSIONS,
    IMPERIAL_CONVERSIONS,
    FAHRENHEIT_PATTERN,
    GRAMS_PER_POUND,
    GRAMS_PER_OUNCE,
    MM_PER_INCH,
    BOOLEAN_FIELDS,
    TRUE_VALUES,
    FALSE_VALUES,
)
from models.smart_paste import CoercionResult, UnitConversion
from utils.text_utils import format_fixed, parse_number, round_half_up

COMPOUND_WEIGHT = re.compile(r"([\d.]+)\s*(?:lbs?|pounds?)\s+([\d.]+)\s*(?:oz|ounces?)", re.IGNORECASE)
DIMENSIONS_INCHES = re.compile(
    r"([\d.]+)\s*[x×]\s*([\d.]+)(?:\s*[x×]\s*([\d.]+))?\s*(?:in(?:ch(?:es)?)?|\")",
    re.IGNORECASE,
)
DIMENSIONS_MM = re.compile(
    r"([\d.]+)\s*[x×]\s*([\d.]+)(?:\s*[x×]\s*([\d.]+))?\s*mm",
    re.IGNORECASE,
)
CCT_RANGE = re.compile(r"(\d{3,5})\s*K?\s*[-–—to]+\s*(\d{3,5})\s*K?", re.IGNORECASE)
BARE_NUMBER = re.compile(r"^(\d+\.?\d*)$")

DIMENSION_SEPARATOR = " × "


def _numbers(match: re.Match) -> Optional[list[float]]:
    """Parsed numeric groups of a match, None if any present group is unparseable."""
    values = []
    for group in match.groups():
        if group is None:
            continue
        number = parse_number(group)
        if number is None:
            return None
        values.append(number)
    return values


def _compound_weight(value: str) -> Optional[UnitConversion]:
    match = COMPOUND_WEIGHT.search(value)
    if not match:
        return None
    numbers = _numbers(match)
    if numbers is None:
        return None
    pounds, ounces = numbers
    grams = pounds * GRAMS_PER_POUND + ounces * GRAMS_PER_OUNCE
    if grams >= 1000:
        return UnitConversion(original=value, normalized=f"{grams / 1000:.2f} kg", unit="kg")
    return UnitConversion(original=value, normalized=f"{round_half_up(grams)} g", unit="g")


def _dimensions(value: str, prefer_metric: bool) -> Optional[UnitConversion]:
    if prefer_metric:
        match = DIMENSIONS_INCHES.search(value)
        numbers = _numbers(match) if match else None
        if numbers:
            dims = [str(round_half_up(n * MM_PER_INCH)) for n in numbers]
            return UnitConversion(original=value, normalized=DIMENSION_SEPARATOR.join(dims) + " mm", unit="mm")
    else:
        match = DIMENSIONS_MM.search(value)
        numbers = _numbers(match) if match else None
        if numbers:
            dims = [f"{n / MM_PER_INCH:.2f}" for n in numbers]
            return UnitConversion(original=value, normalized=DIMENSION_SEPARATOR.join(dims) + " in", unit="in")
    return None


def _single_unit(value: str, prefer_metric: bool) -> Optional[UnitConversion]:
    names = METRIC_CONVERSIONS if prefer_metric else IMPERIAL_CONVERSIONS
    for name in names:
        pattern, factor, unit, decimals = UNIT_CONVERSIONS[name]
        match = pattern.search(value)
        if not match:
            continue
        number = parse_number(match.group(1))
        if number is None:
            continue
        converted = format_fixed(number * factor, decimals)
        return UnitConversion(original=value, normalized=f"{converted} {unit}", unit=unit)
    return None


def _fahrenheit(value: str) -> Optional[UnitConversion]:
    match = FAHRENHEIT_PATTERN.search(value)
    if not match:
        return None
    number = parse_number(match.group(1))
    if number is None:
        return None
    celsius = format_fixed((number - 32) * 5 / 9, 0)
    return UnitConversion(original=value, normalized=f"{celsius} °C", unit="°C")


def normalize_units(value: Optional[str], prefer_metric: bool = True) -> Optional[UnitConversion]:
    """
    Convert a value's units.

    Checked in order: compound weight ("1 lb 5 oz"), dimensions
    ("6.5 x 4.3 x 3.1 inches"), single in/lb/oz (or mm when not metric),
    then °F (metric only).

    Args:
        value: Field value
        prefer_metric: Convert to metric (True) or to inches (False)

    Returns:
        UnitConversion, or None when no conversion applies
    """
    if not value or not isinstance(value, str):
        return None

    return (
        _compound_weight(value)
        or _dimensions(value, prefer_metric)
        or _single_unit(value, prefer_metric)
        or (_fahrenheit(value) if prefer_metric else None)
    )


def _is_boolean_field(name_lower: str) -> bool:
    return any(field in name_lower or name_lower in field for field in BOOLEAN_FIELDS)


def coerce_field_value(spec_name: str, value: Optional[str]) -> Optional[CoercionResult]:
    """
    Coerce a value to the format its field expects.

    - Boolean fields: "included" → "Yes", "n/a" → "No"
    - Color temperature / CCT: "2700K-6500K" → "2700–6500 K"
    - Aperture: "2.8" → "f/2.8"

    Returns:
        CoercionResult, or None when nothing applies
    """
    if not value or not isinstance(value, str):
        return None

    v = value.strip()
    name_lower = (spec_name or "").lower()

    if name_lower and _is_boolean_field(name_lower):
        if TRUE_VALUES.match(v):
            return CoercionResult(original=v, coerced="Yes")
        if FALSE_VALUES.match(v):
            return CoercionResult(original=v, coerced="No")

    if "color temp" in name_lower or "cct" in name_lower:
        match = CCT_RANGE.search(v)
        if match:
            return CoercionResult(original=v, coerced=f"{match.group(1)}–{match.group(2)} K")

    if "aperture" in name_lower:
        match = BARE_NUMBER.match(v)
        if match:
            return CoercionResult(original=v, coerced=f"f/{match.group(1)}")

    return None
