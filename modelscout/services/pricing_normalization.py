"""
Pricing Normalization Utilities

Turns the heterogeneous price values found in catalog records (numbers,
numeric strings, strings carrying currency glyphs, nulls) into a plain float.

parse_price is total: every input yields a finite number and nothing raises.
Negative results are passed through; callers that care clamp them.
"""

import logging
import math
import re
from decimal import Decimal
from typing import Any

logger = logging.getLogger(__name__)

CURRENCY_GLYPHS_PATTERN = re.compile(r"[$€£¥₹]")

# Leading numeric prefix, the same portion a lenient float parser would consume
_NUMERIC_PREFIX_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_leading_number(text: str) -> float | None:
    """
    Parse the leading numeric portion of a string.

    Returns None when the string does not start with a number.

    Examples:
        >>> parse_leading_number("12.50 USD")
        12.5
        >>> parse_leading_number("abc")
    """
    match = _NUMERIC_PREFIX_PATTERN.match(text)
    if not match:
        return None
    value = float(match.group(0))
    if not math.isfinite(value):
        return None
    return value


def parse_price(value: Any) -> float:
    """
    Normalize a raw price value to a float.

    Args:
        value: Price value from a catalog record

    Returns:
        - 0 for None, empty strings, unparseable strings and unsupported types
        - numeric input unchanged (no rounding)
        - string input with currency glyphs and whitespace stripped, parsed as float

    Examples:
        >>> parse_price("$0.0005")
        0.0005
        >>> parse_price("€12.50")
        12.5
        >>> parse_price("garbage")
        0.0
        >>> parse_price(None)
        0.0
    """
    if value is None or value == "":
        return 0.0

    # bool is an int subclass but never a price
    if isinstance(value, bool):
        return 0.0

    if isinstance(value, Decimal):
        value = float(value) if value.is_finite() else 0.0

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0.0
        return value

    if isinstance(value, str):
        cleaned = CURRENCY_GLYPHS_PATTERN.sub("", value).strip()
        parsed = parse_leading_number(cleaned)
        if parsed is None:
            logger.debug(f"Unparseable price value {value!r}, treating as 0")
            return 0.0
        return parsed

    return 0.0
