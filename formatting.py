import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from amounts import parse_float_prefix
from periods import local_date_from_iso


def format_currency(value: Any) -> str:
    """IDR the way id-ID shows it: Rp12.500, no fraction digits, NaN as Rp0."""
    amount = parse_float_prefix(value)
    if math.isnan(amount) or math.isinf(amount):
        return "Rp0"
    rounded = int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if rounded < 0 else ""
    grouped = f"{abs(rounded):,}".replace(",", ".")
    return f"{sign}Rp{grouped}"


def format_date(value: Any) -> str:
    parsed = local_date_from_iso(value)
    if parsed is None:
        return "-"
    return f"{parsed.day}/{parsed.month}/{parsed.year}"
