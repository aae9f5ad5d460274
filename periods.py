from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Sequence
from zoneinfo import ZoneInfo

from amounts import coerce_amount
from config import get_settings
from schemas import ExpenseRecord


@dataclass(frozen=True, order=True)
class MonthKey:
    year: int
    month: int

    def __str__(self) -> str:
        return f"{self.year}-{self.month:02d}"


@dataclass(frozen=True)
class MonthlyView:
    key: MonthKey
    items: tuple[ExpenseRecord, ...]
    total: float


def today_local() -> date:
    return datetime.now(ZoneInfo(get_settings().timezone)).date()


def local_date_from_iso(value: Any) -> Optional[date]:
    """
    Calendar date of an ISO string. Plain dates are taken as-is; timestamps
    carrying an offset are moved into the configured timezone first.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(ZoneInfo(get_settings().timezone))
    return moment.date()


def month_key_from_iso(value: Any) -> Optional[MonthKey]:
    parsed = local_date_from_iso(value)
    if parsed is None:
        return None
    return MonthKey(parsed.year, parsed.month)


def partition_month(
    items: Sequence[ExpenseRecord], month: int, year: int
) -> MonthlyView:
    key = MonthKey(year, month)
    selected = tuple(item for item in items if month_key_from_iso(item.date) == key)
    total = sum((coerce_amount(item.amount) for item in selected), 0.0)
    return MonthlyView(key=key, items=selected, total=total)


class MonthPartitioner:
    """Caches the last partition, keyed on (collection version, month, year)."""

    def __init__(self) -> None:
        self._cache_key: Optional[tuple[int, int, int]] = None
        self._cached: Optional[MonthlyView] = None

    def view(
        self, items: Sequence[ExpenseRecord], version: int, month: int, year: int
    ) -> MonthlyView:
        cache_key = (version, month, year)
        if self._cached is None or self._cache_key != cache_key:
            self._cached = partition_month(items, month, year)
            self._cache_key = cache_key
        return self._cached
