import math
import re
from typing import Any

_NUMERIC_PREFIX = re.compile(r"\s*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")
_NOT_AMOUNT_CHAR = re.compile(r"[^0-9.]")
# id-ID writes thousands with dots: 12.500, 1.234.567
_GROUPED_THOUSANDS = re.compile(r"[1-9][0-9]{0,2}(?:\.[0-9]{3})+")


def parse_float_prefix(value: Any) -> float:
    """
    Parse the leading numeric part of ``value`` the lenient way form inputs are
    read: ``"12abc"`` is 12.0, ``"abc"`` is NaN. Numbers pass through.
    """
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMERIC_PREFIX.match(str(value))
    if not match:
        return math.nan
    try:
        return float(match.group(1))
    except ValueError:
        return math.nan


def coerce_amount(value: Any) -> float:
    """Amount of a fetched record for totals; unparsable amounts count as 0."""
    amount = parse_float_prefix(value)
    if math.isnan(amount):
        return 0.0
    return amount


def normalize_amount_input(raw: str) -> float:
    clean = _NOT_AMOUNT_CHAR.sub("", raw or "")
    if _GROUPED_THOUSANDS.fullmatch(clean):
        clean = clean.replace(".", "")
    return parse_float_prefix(clean)
