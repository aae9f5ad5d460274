from datetime import date

from formatting import format_currency
from periods import (
    MonthKey,
    MonthPartitioner,
    local_date_from_iso,
    month_key_from_iso,
    partition_month,
)
from schemas import ExpenseListOut, ExpenseRecord


def _records(*rows: dict) -> list[ExpenseRecord]:
    return [ExpenseRecord.model_validate(row) for row in rows]


def test_partition_keeps_only_selected_month():
    items = _records(
        {"id": 1, "amount": 50000, "category": "Food", "date": "2024-06-01"},
        {"id": 2, "amount": 20000, "category": "Food", "date": "2024-07-01"},
    )
    view = partition_month(items, 6, 2024)
    assert [item.id for item in view.items] == [1]
    assert view.total == 50000
    assert str(view.key) == "2024-06"


def test_partition_boundaries_by_month():
    items = _records({"id": 1, "amount": 10, "date": "2024-03-15"})
    assert len(partition_month(items, 3, 2024).items) == 1
    assert partition_month(items, 4, 2024).items == ()
    assert partition_month(items, 3, 2023).items == ()


def test_partition_of_empty_collection():
    view = partition_month([], 1, 2024)
    assert view.items == ()
    assert view.total == 0
    assert format_currency(view.total) == "Rp0"


def test_partition_is_idempotent():
    items = _records(
        {"id": 1, "amount": "1500", "date": "2024-05-02"},
        {"id": 2, "amount": 2500.5, "date": "2024-05-31"},
    )
    first = partition_month(items, 5, 2024)
    second = partition_month(items, 5, 2024)
    assert first == second
    assert first.total == 4000.5


def test_unparsable_amount_counts_as_zero_but_is_listed():
    items = _records(
        {"id": 1, "amount": "n/a", "date": "2024-05-02"},
        {"id": 2, "amount": None, "date": "2024-05-03"},
        {"id": 3, "amount": 700, "date": "2024-05-04"},
    )
    view = partition_month(items, 5, 2024)
    assert [item.id for item in view.items] == [1, 2, 3]
    assert view.total == 700


def test_records_without_usable_date_are_excluded():
    items = _records(
        {"id": 1, "amount": 1, "date": None},
        {"id": 2, "amount": 1, "date": "not a date"},
        {"id": 3, "amount": 1, "date": ""},
    )
    assert partition_month(items, 1, 2024).items == ()


def test_offset_timestamps_use_local_calendar_day():
    # 20:00 UTC on 31 March is already 1 April in Jakarta (UTC+7).
    assert local_date_from_iso("2024-03-31T20:00:00Z") == date(2024, 4, 1)
    assert month_key_from_iso("2024-03-31T20:00:00+00:00") == MonthKey(2024, 4)
    assert month_key_from_iso("2024-03-31T20:00:00") == MonthKey(2024, 3)


def test_partitioner_caches_on_version_month_year():
    items = _records({"id": 1, "amount": 10, "date": "2024-03-15"})
    partitioner = MonthPartitioner()
    first = partitioner.view(items, 1, 3, 2024)
    assert partitioner.view(items, 1, 3, 2024) is first

    grown = items + _records({"id": 2, "amount": 5, "date": "2024-03-16"})
    # Same version: the collection is treated as unchanged.
    assert partitioner.view(grown, 1, 3, 2024) is first
    refreshed = partitioner.view(grown, 2, 3, 2024)
    assert refreshed.total == 15
    assert partitioner.view(grown, 2, 4, 2024).items == ()


def test_non_string_dates_and_categories_are_tolerated():
    listing = ExpenseListOut.model_validate(
        {
            "items": [
                {"id": 1, "amount": 10, "category": 7, "date": 20240601},
                {"id": 2, "amount": 20, "category": None, "date": "2024-06-02"},
            ]
        }
    )
    view = partition_month(listing.items, 6, 2024)
    assert [item.id for item in view.items] == [2]
    assert view.total == 20
